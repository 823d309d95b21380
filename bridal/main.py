from fastapi import FastAPI

from .routes import router as api_router

app = FastAPI(title="Bridal Dress Rental")

# API routes
app.include_router(api_router)
