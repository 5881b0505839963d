# umrah_core/__init__.py
