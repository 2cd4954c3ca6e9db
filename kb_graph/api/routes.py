"""
Knowledge Graph API Routes

REST endpoints for graph views, graph analytics, learning paths, the category
hierarchy and knowledge-base statistics. Every route is scoped to one user.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from ..service import KnowledgeGraphService

router = APIRouter(prefix="/api/knowledge-graph", tags=["Knowledge Graph"])


def get_service(request: Request) -> KnowledgeGraphService:
    return request.app.state.service


# Request Models
class MoveCategoryRequest(BaseModel):
    user_id: int
    parent_id: Optional[int] = None


# =============================================================================
# GRAPH VIEWS
# =============================================================================

@router.get("/full/{user_id}")
def full_graph(
    user_id: int,
    document_ids: Optional[List[int]] = Query(None, description="Restrict to these documents"),
    service: KnowledgeGraphService = Depends(get_service)
):
    """Categories, documents and tags with their structural edges."""
    return service.full_graph(user_id, document_ids=document_ids).to_dict()


@router.get("/document-relations/{user_id}")
async def document_relations(
    user_id: int,
    request: Request,
    service: KnowledgeGraphService = Depends(get_service)
):
    """
    Documents and tags, with a weighted edge between every pair of documents
    sharing at least one tag.
    """
    graph = await service.document_relations_async(
        user_id, is_disconnected=request.is_disconnected
    )
    return graph.to_dict()


@router.get("/tag-cloud/{user_id}")
def tag_cloud(user_id: int, service: KnowledgeGraphService = Depends(get_service)):
    return [entry.to_dict() for entry in service.tag_cloud(user_id)]


@router.get("/learning-path/{user_id}")
def learning_path(
    user_id: int,
    goal: Optional[str] = Query(None, description="Keep only documents matching this goal"),
    document_ids: Optional[List[int]] = Query(None, description="Restrict to these documents"),
    service: KnowledgeGraphService = Depends(get_service)
):
    """Chronological path through the user's documents."""
    return service.learning_path(user_id, goal=goal, document_ids=document_ids).to_dict()


# =============================================================================
# ANALYTICS
# =============================================================================

@router.get("/central-nodes/{user_id}")
def central_nodes(user_id: int, service: KnowledgeGraphService = Depends(get_service)):
    return [node.to_dict() for node in service.central_nodes(user_id)]


@router.get("/relation-density/{user_id}")
def relation_density(user_id: int, service: KnowledgeGraphService = Depends(get_service)):
    return service.relation_density(user_id).to_dict()


@router.get("/knowledge-clusters/{user_id}")
def knowledge_clusters(user_id: int, service: KnowledgeGraphService = Depends(get_service)):
    return service.knowledge_clusters(user_id).to_dict()


@router.get("/knowledge-gaps/{user_id}")
def knowledge_gaps(user_id: int, service: KnowledgeGraphService = Depends(get_service)):
    return service.knowledge_gaps(user_id).to_dict()


@router.get("/similar-documents/{user_id}")
async def similar_documents(
    user_id: int,
    request: Request,
    document_id: int = Query(..., description="Reference document"),
    limit: Optional[int] = Query(None, description="Maximum results"),
    service: KnowledgeGraphService = Depends(get_service)
):
    """Documents ranked by number of tags shared with the reference document."""
    results = await service.similar_documents_async(
        user_id, document_id, limit, is_disconnected=request.is_disconnected
    )
    return [doc.to_dict() for doc in results]


# =============================================================================
# CATEGORIES
# =============================================================================

@router.get("/category-tree/{user_id}")
def category_tree(user_id: int, service: KnowledgeGraphService = Depends(get_service)):
    return service.category_tree(user_id).to_dict()


@router.post("/categories/{category_id}/move")
def move_category(
    category_id: int,
    body: MoveCategoryRequest,
    service: KnowledgeGraphService = Depends(get_service)
):
    """Reassign a category's parent. A null parent_id moves it to the root level."""
    category = service.move_category(body.user_id, category_id, body.parent_id)
    return category.to_dict()


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: int,
    user_id: int = Query(..., description="Owner of the category"),
    service: KnowledgeGraphService = Depends(get_service)
):
    return {"deleted": service.delete_category(user_id, category_id)}


# =============================================================================
# STATISTICS
# =============================================================================

@router.get("/statistics/overview/{user_id}")
def overview(user_id: int, service: KnowledgeGraphService = Depends(get_service)):
    """Entity totals and documents created in the last 7 days."""
    return service.overview(user_id).to_dict()


@router.get("/statistics/trend/{user_id}")
def creation_trend(
    user_id: int,
    months: int = Query(6, description="Number of calendar months"),
    service: KnowledgeGraphService = Depends(get_service)
):
    return service.creation_trend(user_id, months).to_dict()


@router.get("/statistics/activity/{user_id}")
def activity(
    user_id: int,
    days: int = Query(7, description="Window length in days"),
    service: KnowledgeGraphService = Depends(get_service)
):
    return service.activity(user_id, days).to_dict()


@router.get("/statistics/efficiency/{user_id}")
def learning_efficiency(
    user_id: int,
    days: int = Query(30, description="Window length in days"),
    service: KnowledgeGraphService = Depends(get_service)
):
    return service.learning_efficiency(user_id, days).to_dict()


@router.get("/statistics/coverage/{user_id}")
def coverage(user_id: int, service: KnowledgeGraphService = Depends(get_service)):
    return service.coverage(user_id).to_dict()


@router.get("/statistics/distribution/{user_id}")
def category_distribution(user_id: int, service: KnowledgeGraphService = Depends(get_service)):
    return service.category_distribution(user_id).to_dict()
