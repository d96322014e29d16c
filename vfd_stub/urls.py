from django.urls import path
from .views import token, wallet_create, wallet_credit


urlpatterns = [
	path("baasauth/token", token),
	path("wallet/create", wallet_create),
	path("wallet/credit", wallet_credit),
]
