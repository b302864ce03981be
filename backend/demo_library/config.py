# config.py

import os

from dotenv import load_dotenv

load_dotenv()

# Directory listed when /demos is called without one
DEMO_DIRECTORY = os.getenv("DEMO_DIRECTORY", "")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
SCAN_WORKERS = int(os.getenv("SCAN_WORKERS", "4"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
