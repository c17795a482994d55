from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse

from ..backends.base import Backend
from ..deps import get_backend
from ..fetchers import HomeFetcher
from ..filters import search_redirect
from ..presentation import to_card
from ..schemas import HomeResponse

router = APIRouter(tags=["home"])


@router.get("/home", response_model=HomeResponse)
def home(backend: Backend = Depends(get_backend)):
    featured, recent = HomeFetcher(backend).fetch()
    return HomeResponse(
        featured=[to_card(j) for j in featured],
        recent=[to_card(j) for j in recent],
    )


@router.get("/search")
def search(q: str = Query("")):
    """Home page search box: forwards to the listing with ``search`` set."""
    target = search_redirect(q)
    if target is None:
        raise HTTPException(status_code=400, detail="Enter a search term")
    return RedirectResponse(target, status_code=303)
