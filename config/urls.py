# config/urls.py

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # JSON API
    path('', include('apps.core.urls')),
    path('api/', include('apps.board.urls')),
]

# Local media in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

# Admin titles
admin.site.site_header = 'GSD Board Admin'
admin.site.site_title = 'GSD Board'
admin.site.index_title = 'System administration'
