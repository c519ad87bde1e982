from greenhouse.api.plants import bp as plants_bp

__all__ = ["plants_bp"]
