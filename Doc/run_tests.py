#!/usr/bin/env python
"""
Test runner script for the whole back-office test suite
Usage: python Doc/run_tests.py (equivalent to python manage.py test backend)
"""
import os
import sys

import django
from django.conf import settings
from django.test.utils import get_runner

if __name__ == "__main__":
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backend.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests([
        'backend.core',
        'backend.theme',
        'backend.emails',
        'backend.payments',
    ])
    sys.exit(bool(failures))
