"""HTTP entry points: the Flask application and the serverless handler."""
