from . import auth, categories, orders, products, shipping_types, states, user_auth, users

ROUTERS = [
    products.router,
    products.product_router,
    categories.router,
    states.router,
    shipping_types.router,
    users.router,
    users.profile_router,
    orders.router,
    auth.router,
    user_auth.router,
]
