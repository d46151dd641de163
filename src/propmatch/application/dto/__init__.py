from .profile_dto import ProfileSnapshot

__all__ = ['ProfileSnapshot']
