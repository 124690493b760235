# module printstream.app
from printstream.app_setup.factory import create_app

# App globale
app = create_app()
