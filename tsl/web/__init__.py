# Presentation Layer
# ==================
# FastAPI JSON API (app.py) and its request/response models (schemas.py).
