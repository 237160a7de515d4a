from uuid import UUID


def notifications_channel(user_id: UUID) -> str:
    return f"notifications:{user_id}"


def post_channel(post_id: UUID) -> str:
    return f"post:{post_id}"
