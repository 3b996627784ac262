# backend/wsgi.py
from salesdash import create_app

app = create_app()
