import os

# Set the Django settings module before any models are imported
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core_backend.settings")

from channels.routing import ProtocolTypeRouter
from django.core.asgi import get_asgi_application

# Owner/customer notifications are published to the channel layer only; no
# websocket routes are served from this project.
application = ProtocolTypeRouter(
    {
        "http": get_asgi_application(),
    }
)
