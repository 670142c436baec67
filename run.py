#!/usr/bin/env python3
"""
CabLink Backend - development server

    FLASK_ENV=development PORT=5000 python run.py

Production runs the factory under a WSGI server instead:

    gunicorn "app:create_app('production')"
"""
import os

from app import create_app

app = create_app(os.getenv('FLASK_ENV', 'development'))

if __name__ == '__main__':
    app.run(
        host=os.getenv('HOST', '127.0.0.1'),
        port=int(os.getenv('PORT', 5000)),
        debug=app.config.get('DEBUG', False),
    )
