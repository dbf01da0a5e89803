"""
Custom hooks for drf-spectacular to customize OpenAPI schema.
"""


def keep_bearer_security_scheme(result, generator, request, public):
    """Drop auto-detected security schemes (jwtAuth, cookieAuth), keep only BearerAuth."""
    schemes = result.get('components', {}).get('securitySchemes')
    if schemes is not None:
        result['components']['securitySchemes'] = {
            'BearerAuth': {
                'type': 'http',
                'scheme': 'bearer',
                'bearerFormat': 'JWT',
                'description': 'JWT access token. Format: `Bearer <token>`'
            }
        }
        for path in result.get('paths', {}).values():
            for operation in path.values():
                if isinstance(operation, dict) and operation.get('security'):
                    operation['security'] = [
                        entry for entry in operation['security']
                        if 'jwtAuth' not in entry and 'cookieAuth' not in entry
                    ] or [{'BearerAuth': []}]
    return result
