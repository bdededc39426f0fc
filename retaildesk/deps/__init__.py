# Request-scoped FastAPI dependencies shared by the page routers.
