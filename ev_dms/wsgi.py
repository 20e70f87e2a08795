"""
WSGI config for ev_dms project.
"""

import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'ev_dms.settings')
application = get_wsgi_application()
