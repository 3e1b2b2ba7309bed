from app.fellowship import create_app

app = create_app()
