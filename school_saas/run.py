import uvicorn

from school_saas import create_app
from school_saas.core.config import settings

app = create_app()


# Route map, handy when wiring a client
@app.get(f"{settings.API_PREFIX}/list-endpoints", include_in_schema=False)
def list_endpoints():
    endpoints = []
    for route in app.router.routes:
        endpoints.append({
            "path": route.path,
            "name": route.name,
            "methods": sorted(getattr(route, "methods", None) or [])
        })
    return {"endpoints": endpoints}


if __name__ == "__main__":
    uvicorn.run("school_saas.run:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
