from fastapi import Depends

from ..core.config import Settings, get_settings
from ..dao.kv_dao import KVDAO
from ..database.kv import create_bindings
from ..search.pipeline import SearchFilterPipeline


async def get_dao(settings: Settings = Depends(get_settings)) -> KVDAO:
    """Dependency to get a DAO bound to this request's store namespaces"""
    bindings = await create_bindings(settings)
    return KVDAO(bindings)


def get_pipeline(settings: Settings = Depends(get_settings)) -> SearchFilterPipeline:
    return SearchFilterPipeline.from_settings(settings)
