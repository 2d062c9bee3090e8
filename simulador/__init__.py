# simulador/__init__.py
