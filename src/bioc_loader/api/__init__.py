# src/bioc_loader/api/__init__.py
