# Schemas package for FastAPI validation
from .validation import *
from .api_models import *
