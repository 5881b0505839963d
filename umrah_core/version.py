# umrah_core/version.py
VERSION = "1.0.0"
