import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from ...core.errors import ProfRatingsError
from ...dao.kv_dao import KVDAO
from ...models.schema import Professor
from ..dependencies import get_dao

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter(prefix="/professors", tags=["Professors"])


@router.get(
    "",
    responses={
        200: {
            "description": "Every professor, without reviews",
            "content": {
                "application/json": {
                    "example": [
                        {
                            "id": "p1",
                            "firstName": "Ada",
                            "lastName": "Lovelace",
                            "department": "CSC",
                            "courses": ["CSC 101"],
                            "numEvals": 2,
                            "overallRating": 4.0,
                            "materialClear": 3.0,
                            "studentDifficulties": 3.0,
                        }
                    ]
                }
            },
        },
        404: {"description": "Professor list has not been built"},
    },
    summary="/professors",
    description="Returns the stored professor list exactly as written. Entries are not validated.",
)
async def get_all_professors(dao: KVDAO = Depends(get_dao)):
    try:
        professor_list = await dao.get_all_professors()
    except ProfRatingsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return Response(content=professor_list, media_type="application/json")


@router.get(
    "/{professor_id}",
    response_model=Professor,
    responses={
        404: {"description": "Professor not found"},
        400: {"description": "Stored professor is malformed"},
    },
    summary="/professors/{professor_id}",
    description="Returns a single professor with reviews grouped by course.",
)
async def get_professor(professor_id: str, dao: KVDAO = Depends(get_dao)):
    try:
        return await dao.get_professor(professor_id)
    except ProfRatingsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put(
    "/{professor_id}",
    status_code=204,
    responses={
        400: {"description": "Path and body ids differ"},
        500: {"description": "Professor failed validation"},
    },
    summary="/professors/{professor_id}",
    description="Creates or replaces a professor record.",
)
async def put_professor(
    professor_id: str, professor: Professor, dao: KVDAO = Depends(get_dao)
):
    if professor.id != professor_id:
        raise HTTPException(
            status_code=400, detail="Professor id does not match the request path"
        )

    try:
        await dao.put_professor(professor)
    except ProfRatingsError as e:
        logger.error(f"Error storing professor {professor_id}: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return Response(status_code=204)
