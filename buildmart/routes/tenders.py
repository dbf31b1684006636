from buildmart.routes.documents import document_router
from buildmart.services.documents import TENDERS_FOLDER, decode_tender

router = document_router(TENDERS_FOLDER, "tender", decode_tender)
