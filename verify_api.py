"""Script de verificación de la API contra un servidor en ejecución"""
import sys
import time
from typing import Optional

import httpx


class Colors:
    """Colores de terminal"""
    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    RESET = "\033[0m"


def print_pass(message: str):
    print(f"{Colors.GREEN}✅ PASS{Colors.RESET}: {message}")


def print_fail(message: str):
    print(f"{Colors.RED}❌ FAIL{Colors.RESET}: {message}")


def print_info(message: str):
    print(f"{Colors.YELLOW}ℹ️  INFO{Colors.RESET}: {message}")


def expect_status(response: httpx.Response, expected: int, label: str) -> bool:
    if response.status_code != expected:
        print_fail(f"{label}: status {response.status_code} (esperado {expected}) - {response.text}")
        return False
    print_pass(f"{label}: {response.status_code}")
    return True


def check_health(client: httpx.Client) -> bool:
    print("\n" + "=" * 60)
    print("Prueba 1: GET /api/health")
    print("=" * 60)

    response = client.get("/api/health")
    if not expect_status(response, 200, "health"):
        return False
    if response.json().get("status") != "OK":
        print_fail(f"status debería ser OK: {response.json()}")
        return False
    print_pass("status OK")
    return True


def check_city_lifecycle(client: httpx.Client, suffix: str) -> Optional[int]:
    """Crea una ciudad y verifica que el duplicado se rechaza"""
    print("\n" + "=" * 60)
    print("Prueba 2: ciudades")
    print("=" * 60)

    name = f"Lima {suffix}"
    response = client.post("/api/cities", json={"name": f"  {name}  "})
    if not expect_status(response, 201, "crear ciudad"):
        return None
    city = response.json()
    if city.get("name") != name:
        print_fail(f"el nombre debería venir recortado: {city.get('name')!r}")
        return None
    print_pass(f"ciudad creada: {city}")

    response = client.post("/api/cities", json={"name": name})
    if not expect_status(response, 400, "ciudad duplicada"):
        return None
    if "error" not in response.json():
        print_fail("la respuesta de error no tiene 'error'")
        return None

    response = client.get("/api/cities/search")
    if not expect_status(response, 200, "búsqueda sin q") or response.json() != []:
        print_fail(f"búsqueda sin q debería ser []: {response.text}")
        return None

    return city["id"]


def check_sponsor_associations(client: httpx.Client, city_id: int, suffix: str) -> Optional[int]:
    print("\n" + "=" * 60)
    print("Prueba 3: patrocinadores y ciudades")
    print("=" * 60)

    body = {"name": "Acme", "email": f"acme{suffix}@example.com", "cityIds": [city_id]}
    response = client.post("/api/sponsors", json=body)
    if not expect_status(response, 201, "crear patrocinador"):
        return None
    sponsor = response.json()
    if sponsor.get("cityIds") != [city_id] or len(sponsor.get("cityNames", [])) != 1:
        print_fail(f"ciudades asociadas incorrectas: {sponsor}")
        return None
    print_pass(f"cityNames: {sponsor['cityNames']}")

    body["cityIds"] = []
    response = client.put(f"/api/sponsors/{sponsor['id']}", json=body)
    if not expect_status(response, 200, "quitar ciudades"):
        return None
    sponsor = response.json()
    if sponsor.get("cityNames") != [] or sponsor.get("cityIds") != []:
        print_fail(f"las listas deberían estar vacías: {sponsor}")
        return None
    print_pass("cityNames: [] y cityIds: []")
    return sponsor["id"]


def check_restaurant_branches(client: httpx.Client, city_id: int) -> Optional[int]:
    print("\n" + "=" * 60)
    print("Prueba 4: restaurantes y sedes")
    print("=" * 60)

    branches = [{"nombre": "Sede Centro", "direccion": "Jr. de la Unión 100"}]
    body = {
        "officialName": "Restaurante Verificación SAC",
        "displayName": "Verificación",
        "cityId": city_id,
        "branches": branches,
    }
    response = client.post("/api/restaurants", json=body)
    if not expect_status(response, 201, "crear restaurante"):
        return None
    restaurant = response.json()

    response = client.get(f"/api/restaurants/{restaurant['id']}")
    if not expect_status(response, 200, "leer restaurante"):
        return None
    if response.json().get("branches") != branches:
        print_fail(f"las sedes no coinciden: {response.json().get('branches')}")
        return None
    print_pass("sedes idénticas tras leer")
    print_info(f"cityName: {response.json().get('cityName')}")
    return restaurant["id"]


def check_city_delete(client: httpx.Client, city_id: int, sponsor_id: int, restaurant_id: int):
    print("\n" + "=" * 60)
    print("Prueba 5: eliminar ciudad")
    print("=" * 60)

    response = client.delete(f"/api/cities/{city_id}")
    if not expect_status(response, 200, "eliminar ciudad"):
        return

    response = client.get(f"/api/restaurants/{restaurant_id}")
    if response.json().get("cityId") is not None:
        print_fail(f"cityId debería quedar en null: {response.json()}")
        return
    print_pass("restaurante conservado con cityId null")

    response = client.get(f"/api/sponsors/{sponsor_id}")
    if not expect_status(response, 200, "patrocinador conservado"):
        return

    # Limpieza
    client.delete(f"/api/sponsors/{sponsor_id}")
    client.delete(f"/api/restaurants/{restaurant_id}")


def main():
    base_url = "http://127.0.0.1:3001"
    if len(sys.argv) > 1:
        base_url = sys.argv[1]

    print(f"\n🚀 Verificando la API")
    print(f"📍 URL: {base_url}")

    suffix = str(int(time.time()))
    try:
        with httpx.Client(base_url=base_url, timeout=30.0) as client:
            if not check_health(client):
                return
            city_id = check_city_lifecycle(client, suffix)
            if city_id is None:
                return
            sponsor_id = check_sponsor_associations(client, city_id, suffix)
            restaurant_id = check_restaurant_branches(client, city_id)
            if sponsor_id and restaurant_id:
                check_city_delete(client, city_id, sponsor_id, restaurant_id)
    except httpx.RequestError as e:
        print_fail(f"Error de conexión: {str(e)}")
        return

    print("\n" + "=" * 60)
    print("✅ Verificación completa")
    print("=" * 60 + "\n")


if __name__ == "__main__":
    main()
