from tiktok_shop import Ok, new
from tiktok_shop.core.logging import configure_logging

if __name__ == "__main__":
    configure_logging("DEBUG")
    result = new()
    if not isinstance(result, Ok):
        raise SystemExit(f"credential invalid: {result.error}")

    client = result.value
    try:
        print(client.get("/api/shop/get_authorized_shop"))
    finally:
        client.adapter.close()


# 运行
# export $(grep -v '^#' .env | xargs)   # 若你用 .env
# python scripts/ping_tiktok.py



# 看到 Ok({'code': 0, ... 'data': {'shop_list': [...]}}) 说明 app_key / secret / access_token 与签名都 OK
