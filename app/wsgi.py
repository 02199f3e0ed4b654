from app.measurebook import create_app

app = create_app()
