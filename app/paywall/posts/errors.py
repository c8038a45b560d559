class PostError(Exception):
    pass


class PostNotFoundError(PostError):
    pass


class PostValidationError(PostError):
    pass


class PostPermissionError(PostError):
    pass
