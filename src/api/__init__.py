"""Http api for hosting game sessions"""

from api.app import create_app
