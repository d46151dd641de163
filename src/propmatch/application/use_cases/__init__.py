from .personalization_use_case import PersonalizationUseCase

__all__ = ['PersonalizationUseCase']
