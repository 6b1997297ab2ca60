"""FastAPI server for the metric index finder"""

import logging

from fastapi import Depends, FastAPI, HTTPException, Query

from finder import IndexFinder, QueryError
from finder.factory import create_finder
from constants import PATH_SEPARATOR
import config

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Metric Index Finder",
    description="Glob lookup of metric paths through a forward/reversed index table",
    version="1.0.0"
)


def get_finder() -> IndexFinder:
    return create_finder()


def to_graphite_node(path: str) -> dict:
    """Graphite /metrics/find node for a matched path."""
    leaf = not path.endswith(PATH_SEPARATOR)
    node_id = path if leaf else path[:-1]
    return {
        "text": node_id.rsplit(PATH_SEPARATOR, 1)[-1],
        "id": node_id,
        "leaf": int(leaf),
        "expandable": int(not leaf),
        "allowChildren": int(not leaf),
    }


# Endpoints
@app.get("/")
def root():
    """Health check."""
    return {"status": "ok", "service": "Metric Index Finder", "version": "1.0"}


@app.get("/metrics/find")
def metrics_find(
    query: str = Query(..., min_length=1, description="Glob pattern"),
    from_: int = Query(0, alias="from", ge=0, description="Unix timestamp"),
    until: int = Query(0, ge=0, description="Unix timestamp"),
    finder: IndexFinder = Depends(get_finder),
):
    """Matched nodes in Graphite's find format."""
    index_query = finder.query(query)
    try:
        index_query.execute(from_, until)
    except QueryError as e:
        logger.error(f"find {query} failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return [
        to_graphite_node(index_query.abs(row).decode("utf-8"))
        for row in index_query.list()
    ]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
