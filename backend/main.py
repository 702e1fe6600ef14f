# backend/main.py
import os

from esg_ddq.api import api_router
from esg_ddq.api.errors import register_exception_handlers
from esg_ddq.core.lifespan import lifespan
from esg_ddq.core.middleware import setup_middleware
from fastapi import FastAPI


app = FastAPI(
    title="ESG DDQ API",
    version="1.0.0",
    description="Generate ESG Due Diligence Questionnaires and Investment Memos from company documents",
    lifespan=lifespan
)

# Setup middleware
setup_middleware(app)
register_exception_handlers(app)

# Register API routes
app.include_router(api_router)

# ---------- Run ----------

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        log_level="info"
    )
