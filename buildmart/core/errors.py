from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, DatabaseError, OperationalError


def parse_exception_to_error_detail(e: Exception, context: str = "") -> dict:
    """
    Parse exception into a structured error detail dictionary with clear messages
    """
    if isinstance(e, IntegrityError):
        error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)

        if "unique constraint" in error_msg.lower() or "duplicate key" in error_msg.lower():
            return {
                "error": "DuplicateEntryError",
                "message": "This record already exists in the database",
                "type": "duplicate_constraint",
                "suggestion": "Please check your data for duplicate values"
            }
        elif "not null" in error_msg.lower() or "null value" in error_msg.lower():
            return {
                "error": "MissingRequiredFieldError",
                "message": "One or more required fields are missing",
                "type": "missing_field",
                "suggestion": "Please ensure all required fields are provided"
            }
        elif "foreign key" in error_msg.lower():
            return {
                "error": "ForeignKeyConstraintError",
                "message": "Referenced data does not exist",
                "type": "foreign_key_violation",
                "suggestion": "Please ensure the referenced company, category or user exists"
            }
        return {
            "error": "DatabaseConstraintError",
            "message": "Database constraint violation occurred",
            "type": "constraint_violation",
            "suggestion": "Please check your data meets all database requirements"
        }

    elif isinstance(e, OperationalError):
        return {
            "error": "DatabaseConnectionError",
            "message": "Unable to connect to the database or query execution failed",
            "type": "database_connection",
            "suggestion": "Please try again later or contact system administrator"
        }

    elif isinstance(e, DatabaseError):
        return {
            "error": "DatabaseError",
            "message": "A database error occurred while processing your request",
            "type": "database_error",
            "suggestion": "Please verify your data and try again"
        }

    elif isinstance(e, ValidationError):
        return {
            "error": "ValidationError",
            "message": "Data validation failed",
            "type": "validation_error",
            "validation_details": e.errors(include_url=False, include_context=False),
            "suggestion": "Please check your data format and required fields"
        }

    elif isinstance(e, ValueError):
        return {
            "error": "ValueError",
            "message": str(e) or "Invalid value provided",
            "type": "value_error",
            "suggestion": "Please check the data types and values of your input"
        }

    error_message = str(e) if str(e) else "An unexpected error occurred"
    return {
        "error": "InternalServerError",
        "message": f"An unexpected error occurred while {context}" if context else error_message,
        "type": "server_error",
        "suggestion": "Please try again or contact support if the issue persists"
    }


def validation_error(e: ValidationError) -> HTTPException:
    """400 for a payload that failed schema validation"""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=parse_exception_to_error_detail(e),
    )


def not_found(entity: str, record_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "NotFoundError",
            "message": f"{entity} with ID {record_id} not found",
            "type": "not_found"
        }
    )


def server_error(e: Exception, context: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=parse_exception_to_error_detail(e, context),
    )


def storage_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "StorageServiceError",
            "message": "Blob storage is not configured. Check server logs for details.",
            "type": "service_unavailable"
        }
    )


def conflict(message: str) -> HTTPException:
    """409 for a write based on a stale document version"""
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "error": "ConflictError",
            "message": message,
            "type": "stale_version",
            "suggestion": "Reload the latest version and retry your change"
        }
    )


def upload_error(e: ValueError, field: str) -> HTTPException:
    """400 for a rejected upload (size, count, or not an image)"""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "error": "ValidationError",
            "message": str(e),
            "field": field,
            "type": "invalid_upload"
        }
    )


def bad_request(message: str, field: str = None) -> HTTPException:
    detail = {"error": "ValidationError", "message": message, "type": "value_error"}
    if field:
        detail["field"] = field
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
