def initials(value, record):
    return f"{record.first_name[:1]}{record.last_name[:1]}".upper()


def register(registry):
    registry.register("initials", initials)
