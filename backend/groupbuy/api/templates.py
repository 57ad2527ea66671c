"""
Product Info Templates API Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException

from groupbuy.api.deps import get_template_repository
from groupbuy.core.auth import TokenUser, require_admin
from groupbuy.domain.template import TemplateWrite
from groupbuy.repositories.template_repository import TemplateRepository

router = APIRouter()


@router.get("/")
async def get_templates(repo: TemplateRepository = Depends(get_template_repository)):
    try:
        templates = repo.find_all()
        return {
            "status": "success",
            "count": len(templates),
            "data": [template.to_dict() for template in templates]
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching templates: {str(e)}")


@router.get("/{template_id}")
async def get_template(template_id: int, repo: TemplateRepository = Depends(get_template_repository)):
    try:
        template = repo.find_by_id(template_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching template: {str(e)}")

    if template is None:
        raise HTTPException(status_code=404, detail=f"Template {template_id} not found")
    return {"status": "success", "data": template.to_dict()}


@router.post("/", status_code=201)
async def create_template(
    payload: TemplateWrite,
    admin: TokenUser = Depends(require_admin),
    repo: TemplateRepository = Depends(get_template_repository)
):
    try:
        template = repo.create(payload, created_by=admin.id)
        return {"status": "success", "data": template.to_dict()}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating template: {str(e)}")


@router.put("/{template_id}")
async def update_template(
    template_id: int,
    payload: TemplateWrite,
    admin: TokenUser = Depends(require_admin),
    repo: TemplateRepository = Depends(get_template_repository)
):
    try:
        template = repo.update(template_id, payload)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating template: {str(e)}")

    if template is None:
        raise HTTPException(status_code=404, detail=f"Template {template_id} not found")
    return {"status": "success", "data": template.to_dict()}


@router.delete("/{template_id}")
async def delete_template(
    template_id: int,
    admin: TokenUser = Depends(require_admin),
    repo: TemplateRepository = Depends(get_template_repository)
):
    try:
        deleted = repo.delete(template_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting template: {str(e)}")

    if not deleted:
        raise HTTPException(status_code=404, detail=f"Template {template_id} not found")
    return {"status": "success", "message": f"Template {template_id} deleted"}
