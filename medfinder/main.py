from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi import APIRouter, Depends, HTTPException, Query

from medfinder.models.schemas import Coordinate, Disease, PredictRequest, PredictResponse, PredictionItem
from medfinder.services.catalog import CatalogError, get_disease, load_catalog, search_diseases, search_symptoms, symptom_names
from medfinder.services.geocoding import ReverseGeocoder
from medfinder.services.prediction import rank
from medfinder.core.config import configure_logging, get_settings

settings = get_settings()
configure_logging(settings)

app = FastAPI(title="Disease Information System", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api = APIRouter(prefix="/api/v1")


def _catalog():
    try:
        return load_catalog(settings.catalog_path)
    except CatalogError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@api.get("/health")
async def health():
    return {"status": "ok"}


@api.get("/symptoms")
async def list_symptoms(q: str = Query("", min_length=0)):
    items = search_symptoms(_catalog(), q)
    return {"count": len(items), "items": items}


@api.get("/diseases")
async def list_diseases(q: str = Query("", min_length=0)):
    items = search_diseases(_catalog(), q)
    return {"count": len(items), "items": items}


@api.get("/diseases/{disease_id}", response_model=Disease)
async def disease_detail(disease_id: int):
    disease = get_disease(_catalog(), disease_id)
    if disease is None:
        raise HTTPException(status_code=404, detail=f"Disease {disease_id} not found")
    return disease


@api.post("/predict", response_model=PredictResponse)
async def predict(request: PredictRequest):
    catalog = _catalog()
    results = rank(catalog.diseases, request.symptom_ids, request.location)
    items = [
        PredictionItem(result=r, symptom_names=symptom_names(catalog, r.disease.symptoms))
        for r in results
    ]
    return PredictResponse(count=len(items), items=items)


def get_geocoder() -> ReverseGeocoder:
    return ReverseGeocoder(
        settings.geocoder_url,
        user_agent=settings.geocoder_user_agent,
        timeout=settings.geocoder_timeout,
    )


@api.get("/location/describe")
async def describe_location(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    geocoder: ReverseGeocoder = Depends(get_geocoder),
):
    address = await geocoder.describe(Coordinate(latitude=lat, longitude=lon))
    return {"address": address}


app.include_router(api)


def run() -> None:
    import uvicorn

    uvicorn.run("medfinder.main:app", host=settings.host, port=settings.port, reload=settings.debug)
