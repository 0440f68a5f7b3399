import base64
import functools
import logging
import re
import uuid
from typing import Annotated, Any, Dict, Optional

import anyio
from fastapi import (
    APIRouter,
    Body,
    Depends,
    File,
    Form,
    Header,
    HTTPException,
    Response,
    UploadFile,
    status,
)
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from docsign.app.core.config import Settings, get_settings
from docsign.app.schemas.signature import VerificationResult
from docsign.app.services.crypto import KeyFormatError
from docsign.app.services.keys import export_key_bundle, generate_user_key_pair
from docsign.app.services.pdf_composer import (
    DocumentFormatError,
    render_document,
)
from docsign.app.services.records import build_verification_bundle
from docsign.app.services.signing import sign_document
from docsign.app.services.verification import verify_signature

logger = logging.getLogger("docsign.api")

router = APIRouter(prefix="/pdf", tags=["PDF Signatures"])

NEW_KEYS_WARNING = (
    "IMPORTANT: store these keys safely. "
    "The private key is not kept on the server."
)

# =============================================================================
# Request bodies
# =============================================================================


class _CamelBody(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class KeyRequest(_CamelBody):
    user_name: str


class GenerateRequest(_CamelBody):
    title: str = ""
    content: str = ""


# =============================================================================
# Dependency providers
# =============================================================================

def get_correlation_id(
    x_correlation_id: Annotated[
        Optional[str],
        Header(description="Audit trace ID"),
    ] = None,
) -> str:
    """Extract or generate a correlation ID for end-to-end traceability."""
    if x_correlation_id and len(x_correlation_id) > 128:
        return str(uuid.uuid4())
    return x_correlation_id or str(uuid.uuid4())


def _safe_filename(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", title)


# =============================================================================
# POST /pdf/keys
# =============================================================================

@router.post("/keys", summary="Generate an RSA key pair for a user")
async def create_keys(
    body: KeyRequest,
    response: Response,
    correlation_id: Annotated[str, Depends(get_correlation_id)],
) -> Dict[str, Any]:
    if not body.user_name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="userName is required",
            headers={"X-Correlation-ID": correlation_id},
        )

    user_key_pair = await anyio.to_thread.run_sync(
        generate_user_key_pair, body.user_name
    )

    logger.info("keys_generated", extra={"trace_id": correlation_id})
    response.headers["X-Correlation-ID"] = correlation_id
    return export_key_bundle(user_key_pair)


# =============================================================================
# POST /pdf/generate
# =============================================================================

@router.post(
    "/generate",
    summary="Render a PDF document from a title and text",
    response_class=Response,
    responses={
        200: {
            "content": {"application/pdf": {}},
            "description": "Rendered PDF document",
        },
        400: {"description": "Missing title or content"},
    },
)
async def generate_pdf(
    body: GenerateRequest,
    correlation_id: Annotated[str, Depends(get_correlation_id)],
) -> Response:
    if not body.title or not body.content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="title and content are required",
            headers={"X-Correlation-ID": correlation_id},
        )

    try:
        pdf_bytes = await anyio.to_thread.run_sync(
            render_document, body.title, body.content
        )
    except Exception as exc:
        logger.exception(
            "pdf_generation_failed", extra={"trace_id": correlation_id}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="PDF generation failed",
            headers={"X-Correlation-ID": correlation_id},
        ) from exc

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": (
                f'attachment; filename="{_safe_filename(body.title)}.pdf"'
            ),
            "X-Correlation-ID": correlation_id,
        },
    )


# =============================================================================
# POST /pdf/sign
# =============================================================================

@router.post(
    "/sign",
    summary="Sign a PDF and return its detached signature record",
    responses={
        400: {"description": "Missing file or signer"},
        413: {"description": "Payload too large"},
        415: {"description": "Unsupported media type"},
        422: {"description": "Invalid PDF or key input"},
        500: {"description": "Signing failure"},
    },
)
async def sign_pdf(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
    correlation_id: Annotated[str, Depends(get_correlation_id)],
    pdf: Annotated[
        Optional[UploadFile],
        File(description="PDF document to sign"),
    ] = None,
    signer_name: Annotated[str, Form(alias="signerName")] = "",
    use_existing_keys: Annotated[bool, Form(alias="useExistingKeys")] = False,
    private_key: Annotated[Optional[str], Form(alias="privateKey")] = None,
    public_key: Annotated[Optional[str], Form(alias="publicKey")] = None,
) -> Dict[str, Any]:
    """
    Sign an uploaded PDF.

    When the caller does not supply both keys a fresh pair is generated
    and returned once in the response. Keys are never stored.
    """
    if pdf is None or not signer_name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A PDF file and signerName are required",
            headers={"X-Correlation-ID": correlation_id},
        )

    if pdf.content_type != "application/pdf":
        logger.warning(
            "invalid_media_type",
            extra={
                "content_type": pdf.content_type,
                "trace_id": correlation_id,
            },
        )
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only 'application/pdf' files are accepted.",
            headers={"X-Correlation-ID": correlation_id},
        )

    max_bytes = settings.max_pdf_size_bytes

    # ------------------------------------------------------------------
    # 1. Bounded read
    # ------------------------------------------------------------------
    pdf_bytes = await pdf.read(max_bytes + 1)

    if not pdf_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded PDF is empty",
            headers={"X-Correlation-ID": correlation_id},
        )

    if len(pdf_bytes) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"PDF exceeds {settings.max_pdf_size_mb} MB limit",
            headers={"X-Correlation-ID": correlation_id},
        )

    # ------------------------------------------------------------------
    # 2. Key selection
    # ------------------------------------------------------------------
    new_keys = not (use_existing_keys and private_key and public_key)

    if new_keys:
        key_pair = await anyio.to_thread.run_sync(
            generate_user_key_pair, signer_name
        )
        private_key = key_pair.private_key
        public_key = key_pair.public_key

    # ------------------------------------------------------------------
    # 3. Signing
    # ------------------------------------------------------------------
    try:
        signed = await anyio.to_thread.run_sync(
            functools.partial(
                sign_document,
                pdf_bytes,
                signer_name,
                private_key,
                public_key,
            )
        )
    except (KeyFormatError, DocumentFormatError) as exc:
        logger.warning(
            "sign_rejected",
            extra={"reason": str(exc), "trace_id": correlation_id},
        )
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
            headers={"X-Correlation-ID": correlation_id},
        ) from exc
    except Exception as exc:
        logger.exception("sign_failed", extra={"trace_id": correlation_id})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="PDF signing failed",
            headers={"X-Correlation-ID": correlation_id},
        ) from exc

    signed_pdf_b64 = base64.b64encode(signed.signed_pdf_bytes).decode("ascii")

    body: Dict[str, Any] = {
        "message": "PDF signed successfully",
        "signatureInfo": signed.signature_info.to_wire(),
        "certificateInfo": signed.certificate_info.to_wire(),
        "signedPdf": signed_pdf_b64,
        "verificationBundle": build_verification_bundle(
            document_name=pdf.filename or "document.pdf",
            signed=signed,
        ).to_wire(),
    }
    if new_keys:
        body["keyPair"] = {
            "publicKey": public_key,
            "privateKey": private_key,
            "warning": NEW_KEYS_WARNING,
        }

    response.headers["X-PDF-Data"] = signed_pdf_b64
    response.headers["X-Correlation-ID"] = correlation_id
    return body


# =============================================================================
# POST /pdf/verify
# =============================================================================

@router.post("/verify", summary="Verify a detached signature record")
async def verify_pdf(
    response: Response,
    correlation_id: Annotated[str, Depends(get_correlation_id)],
    payload: Dict[str, Any] = Body(...),
) -> Dict[str, Any]:
    """
    Verify ``{"signatureInfo": {...}}`` or a full verification bundle.

    A failed verification is a 200 with ``isValid: false``.
    """
    record = payload.get("signatureInfo", payload)
    if (
        not isinstance(record, dict)
        or not record.get("signature")
        or not record.get("publicKey")
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Incomplete signature information",
            headers={"X-Correlation-ID": correlation_id},
        )

    result: VerificationResult = verify_signature(payload)

    logger.info(
        "verify_completed",
        extra={"is_valid": result.is_valid, "trace_id": correlation_id},
    )
    response.headers["X-Correlation-ID"] = correlation_id
    return result.to_wire()
