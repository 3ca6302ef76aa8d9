def bad_request(message):
    return {"ok": False, "error": message}, 400


def read_payload(request):
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


def clean_text(data, field):
    return str(data.get(field) or "").strip()


def parse_age(data):
    raw = data.get("age")
    if isinstance(raw, bool):
        return None
    try:
        age = int(raw)
    except (TypeError, ValueError):
        return None
    return age if age >= 0 else None
