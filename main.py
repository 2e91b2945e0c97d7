"""
Demo application.

    gatehouse run main:app

    curl localhost:8000/test -H 'api_key: MY_API_KEY' -H 'business_id: 892367480'
"""
import os

from gatehouse import (
    App,
    AuthGuard,
    BusinessGuard,
    Controller,
    SkipAuthorizationCheck,
    UseGuards,
    get,
)

@Controller()
class AppController:
    @get()
    def get_hello(self):
        return "Hello World!"

    @get("test")
    @UseGuards(AuthGuard, BusinessGuard)
    def test(self):
        return "This is a Test Route"

@Controller("/secure", guards=[AuthGuard])
class SecureController:
    @get()
    def index(self):
        return {"message": "Authorized"}

    @get("public")
    @SkipAuthorizationCheck()
    def public(self):
        return {"message": "No api_key needed here"}

def create_app(global_auth: bool = False) -> App:
    app = App()

    api_key = os.environ.get("GATEHOUSE_API_KEY")
    if api_key:
        app.provide_guard(AuthGuard(api_key=api_key))
    business_id = os.environ.get("GATEHOUSE_BUSINESS_ID")
    if business_id:
        app.provide_guard(BusinessGuard(business_id=business_id))

    # Global binding: every route, including "/", then needs api_key.
    if global_auth:
        app.use_global_guards(AuthGuard)

    app.register_controller(AppController)
    app.register_controller(SecureController)
    return app

app = create_app()
