import uvicorn

from schoolportal import create_app

app = create_app()

if __name__ == "__main__":
    uvicorn.run("schoolportal.run:app", host="0.0.0.0", port=8000, reload=True)
