"""
WSGI entry point for the Trivia World server.
Used for production deployment with Gunicorn.
"""

from app import create_app

app, socketio, container = create_app()

if __name__ == "__main__":
    # For development without Gunicorn
    socketio.run(app, host='0.0.0.0', port=3001, debug=True)
else:
    # For production WSGI servers
    application = app
