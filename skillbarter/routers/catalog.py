"""Skill catalog routes."""
from typing import List

from fastapi import APIRouter, Depends

from skillbarter.dependencies import get_skill_catalog
from skillbarter.schemas import CategoryResponse, SkillResponse, SubcategoryResponse
from skillbarter.services import SkillCatalog

router = APIRouter(prefix="/api/v1", tags=["catalog"])


@router.get("/skills", response_model=List[SkillResponse])
def list_skills(catalog: SkillCatalog = Depends(get_skill_catalog)):
    return catalog.list_skills()


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(catalog: SkillCatalog = Depends(get_skill_catalog)):
    return catalog.list_categories()


@router.get("/categories/{category_id}/subcategories", response_model=List[SubcategoryResponse])
def list_subcategories(category_id: int, catalog: SkillCatalog = Depends(get_skill_catalog)):
    return catalog.list_subcategories(category_id)


@router.get("/subcategories/{subcategory_id}/skills", response_model=List[SkillResponse])
def skills_in_subcategory(subcategory_id: int, catalog: SkillCatalog = Depends(get_skill_catalog)):
    return catalog.skills_in_subcategory(subcategory_id)
