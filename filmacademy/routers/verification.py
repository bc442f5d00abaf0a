"""Public certificate verification; no authentication."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from filmacademy.core.database import get_db
from filmacademy.modules.learning.schemas import CertificateVerification
from filmacademy.modules.learning.service import CertificationService

router = APIRouter(tags=["Verification"])


@router.get(
    "/verify-certificate/{certificate_number}",
    response_model=CertificateVerification,
)
def verify_certificate(certificate_number: str, db: Session = Depends(get_db)):
    return CertificationService(db).verify(certificate_number)
