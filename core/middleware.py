def auth_token(get_response):
    """
    Promote the http-only access_token cookie to a token Authorization header
    so DRF's TokenAuthentication can pick it up.
    """

    def middleware(request):
        token = request.COOKIES.get("access_token")
        if token and "HTTP_AUTHORIZATION" not in request.META:
            request.META["HTTP_AUTHORIZATION"] = f"Token {token}"

        return get_response(request)

    return middleware
