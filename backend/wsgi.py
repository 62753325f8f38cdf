# backend/wsgi.py
from pshop import create_app

app = create_app()
