import os

import django

# Configure Django settings before importing Django models
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'catering.test_settings')
django.setup()
