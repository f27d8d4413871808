from licenseptium.api.routes.validation import router as validation_router

__all__ = ["validation_router"]
