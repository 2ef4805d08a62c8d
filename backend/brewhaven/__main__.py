import uvicorn

from brewhaven.config import settings


def main():
    uvicorn.run("brewhaven.main:app", host=settings.APP_HOST, port=settings.APP_PORT)


if __name__ == "__main__":
    main()
