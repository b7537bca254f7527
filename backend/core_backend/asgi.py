import os

from channels.routing import ProtocolTypeRouter
from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core_backend.settings")

# Initialize Django ASGI application early to ensure AppRegistry is populated
# before importing code that may import ORM models.
django_asgi_app = get_asgi_application()

# Websocket consumers for the notification and tracking groups live with the
# client-facing gateway; this process only publishes to the channel layer.
application = ProtocolTypeRouter(
    {
        "http": django_asgi_app,
    }
)
