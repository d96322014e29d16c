"""Django settings for the Assura Cash wallet backend.


This project serves the wallet/ledger API behind the Assura Cash app:
- main, budget and goal wallets per user and per account mode (demo/live)
- group savings circles
- VFD BaaS bank sub-accounts (vfd_stub in development) and a verified credit webhook
"""

import os
from pathlib import Path
from decimal import Decimal


BASE_DIR = Path(__file__).resolve().parent.parent
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG = os.getenv("DEBUG", "1") in ("1", "true", "True", "yes")
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "*").split(",")
CSRF_TRUSTED_ORIGINS = os.getenv("CSRF_TRUSTED_ORIGINS", "").split(",") if os.getenv("CSRF_TRUSTED_ORIGINS") else []

def env_bool(name, default=""):
    v = os.getenv(name, default)
    return v.lower() in ("1", "true", "yes", "on")

def env_list(name, default=""):
    v = os.getenv(name, default)
    return [item.strip() for item in v.split(",") if item.strip()]

#######################
# VFD BaaS credentials (client-credentials token exchange)
VFD_BASE_URL = os.getenv("VFD_BASE_URL", "http://localhost:8000/stub/vfd")
VFD_CONSUMER_KEY = os.getenv("VFD_CONSUMER_KEY", "dev-consumer-key")
VFD_CONSUMER_SECRET = os.getenv("VFD_CONSUMER_SECRET", "dev-consumer-secret")
VFD_TIMEOUT_SECONDS = float(os.getenv("VFD_TIMEOUT_SECONDS", "10"))
VFD_BANK_NAME = "VFD Microfinance Bank"

# Sandbox-only KYC values sent on wallet creation
VFD_SANDBOX_BVN = os.getenv("VFD_SANDBOX_BVN", "22222222222")
VFD_SANDBOX_DOB = os.getenv("VFD_SANDBOX_DOB", "1990-01-01")

# HMAC secret for the VFD credit webhook (set in env)
VFD_WEBHOOK_SECRET = os.getenv("VFD_WEBHOOK_SECRET", "dev-secret-change-me")

# Optional IP allowlist for the VFD webhook (CIDRs). Empty => allow all (dev).
VFD_WEBHOOK_IP_ALLOWLIST = env_list("VFD_WEBHOOK_IP_ALLOWLIST")

DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "NGN")

# Optional ceilings
MAX_SINGLE_TRANSFER_NGN = Decimal(os.getenv("MAX_SINGLE_TRANSFER_NGN", "10000000.00"))
#######################


INSTALLED_APPS = [
	"django.contrib.admin",
	"django.contrib.auth",
	"django.contrib.contenttypes",
	"django.contrib.sessions",
	"django.contrib.messages",
	"django.contrib.staticfiles",
	# local apps
	"core",
	"api",
	"vfd_stub",
]


MIDDLEWARE = [
	"django.middleware.security.SecurityMiddleware",
	"django.contrib.sessions.middleware.SessionMiddleware",
	"django.middleware.common.CommonMiddleware",
	"django.middleware.csrf.CsrfViewMiddleware",
	"django.contrib.auth.middleware.AuthenticationMiddleware",
	"django.contrib.messages.middleware.MessageMiddleware",
]


ROOT_URLCONF = "assura_cash.urls"
TEMPLATES = [
	{
		"BACKEND": "django.template.backends.django.DjangoTemplates",
		"DIRS": [],
		"APP_DIRS": True,
		"OPTIONS": {
			"context_processors": [
				"django.template.context_processors.debug",
				"django.template.context_processors.request",
				"django.contrib.auth.context_processors.auth",
				"django.contrib.messages.context_processors.messages",
			],
		},
	},
]


WSGI_APPLICATION = "assura_cash.wsgi.application"


DB_ENGINE = os.getenv("DB_ENGINE", "sqlite")
if DB_ENGINE == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB", "assura_cash"),
            "USER": os.getenv("POSTGRES_USER", "assura_cash"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", "assura_cash"),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }


AUTH_PASSWORD_VALIDATORS = [
	{"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator", "OPTIONS": {"min_length": 8}},
	{"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
]
LOGIN_URL = "/api/auth/login"


LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True


STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOGGING = {
	"version": 1,
	"disable_existing_loggers": False,
	"formatters": {
		"plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
	},
	"handlers": {
		"console": {"class": "logging.StreamHandler", "formatter": "plain"},
	},
	"root": {"handlers": ["console"], "level": LOG_LEVEL},
	"loggers": {
		"django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
	},
}


# Money is held with 2 decimals; circles default to this many members.
AMOUNT_DECIMALS = 2
DEFAULT_CIRCLE_MAX_MEMBERS = 50
