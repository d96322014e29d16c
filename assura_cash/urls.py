"""URL routing for the wallet API + the local VFD sandbox stub.


The /api/ namespace exposes wallet, circle, activity and profile operations plus
the VFD create-wallet call and credit webhook; /stub/vfd/ exposes a deterministic
BaaS provider used in development. In production VFD_BASE_URL points at VFD.
"""

from django.contrib import admin
from django.urls import path, include


urlpatterns = [
	path("admin/", admin.site.urls),
	path("api/", include("api.urls")),
	path("stub/vfd/", include("vfd_stub.urls")),
]
