"""API V1 Router"""

from fastapi import APIRouter

# Import endpoint routers
from schoolpay.api.v1.endpoints import (
    auth, bills, payments, reports,
    institutions, academic_years, classes, students,
    finance, scholarships, activities, profiles,
    promotions,
)

# Create API v1 router
api_router = APIRouter()

# Include endpoint routers with prefixes and tags
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(bills.router, prefix="/bills", tags=["Bills"])
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
api_router.include_router(institutions.router, prefix="/institutions", tags=["Institutions"])
api_router.include_router(academic_years.router, prefix="/academic-years", tags=["Academic Years"])
api_router.include_router(classes.router, prefix="/classes", tags=["Classes"])
api_router.include_router(students.router, prefix="/students", tags=["Student Management"])
api_router.include_router(finance.router, prefix="/finance", tags=["Finance"])
api_router.include_router(scholarships.router, prefix="/scholarships", tags=["Scholarships"])
api_router.include_router(activities.router, prefix="/activities", tags=["Activities"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["User Profiles"])
api_router.include_router(promotions.router, prefix="/promotions", tags=["Class Promotion"])
