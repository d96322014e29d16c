import pytest
from django.test import Client

from core import services


@pytest.fixture
def user(django_user_model):
	return django_user_model.objects.create_user(username="ada@example.com", email="ada@example.com", password="pw-ada-123")


@pytest.fixture
def other_user(django_user_model):
	return django_user_model.objects.create_user(username="tunde@example.com", email="tunde@example.com", password="pw-tunde-123")


@pytest.fixture
def funded_user(user):
	"""ada with ₦10,000 in the demo main wallet"""
	services.top_up(user, "10000", "demo")
	return user


@pytest.fixture
def auth_client(user):
	client = Client()
	client.force_login(user)
	return client
