import capguard as cg

get_permission = cg.Permission("cache:get")
set_permission = cg.Permission("cache:set")

cache = {
    "gang starr": b"step in the arena",
    "digable planets": b"blowout comb",
}


@cg.requires(get_permission)
def get(key: str) -> bytes:
    return bytes(cache[key])


@cg.requires(set_permission)
def put(key: str, data: bytes) -> None:
    cache[key] = bytes(data)


guest = cg.UserContext.create("guest", "staff", get_permission)

with cg.use_context(guest):
    data = get("gang starr")
    print("Result:", data)

    try:
        put("sucker mc", data)
    except cg.SecurityViolation as exc:
        print("Denied:", exc)

put("sucker mc", data, security=cg.ROOT)
print("Keys:", sorted(cache))
