from fastapi import APIRouter

router = APIRouter()


@router.get("/")
def index():
    return {"message": "Hello world!"}


@router.get("/health")
def health():
    return {"status": "ok"}
