from routers import auth, products, suppliers, users

__all__ = ["auth", "products", "suppliers", "users"]
