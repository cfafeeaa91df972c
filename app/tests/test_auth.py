from demandas.auth import get_password_hash, verify_password
from demandas.models import Usuario
from demandas.services.usuarios_service import USUARIOS_PADRAO, seed_usuarios


def test_login_success(client, usuarios):
    response = client.post("/api/auth/login", json={"email": "ranielly-s@zaminebrasil.com", "senha": "123456"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["usuario"]["id"] == 1
    assert body["usuario"]["role"] == "funcionario"
    assert body["usuario"]["conquistas"] == ["star", "fire", "gold"]
    assert "senha" not in body["usuario"]
    assert "senhaHash" not in body["usuario"]


def test_login_gestor(client, usuarios):
    response = client.post("/api/auth/login", json={"email": "julio-s@zaminebrasil.com", "senha": "admin123"})
    assert response.status_code == 200
    assert response.json()["usuario"]["role"] == "gestor"


def test_login_failures_are_indistinguishable(client, usuarios):
    wrong_password = client.post("/api/auth/login", json={"email": "ranielly-s@zaminebrasil.com", "senha": "errada"})
    unknown_email = client.post("/api/auth/login", json={"email": "ninguem@zaminebrasil.com", "senha": "123456"})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"success": False, "error": "Credenciais invalidas"}


def test_login_missing_fields(client):
    for payload in ({}, {"email": "a@b.com"}, {"senha": "123456"}, {"email": 10, "senha": ["x"]}):
        response = client.post("/api/auth/login", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == "Email e senha sao obrigatorios"


def test_passwords_are_hashed(db_session, usuarios):
    usuario = db_session.get(Usuario, 1)
    assert usuario.senha_hash != "123456"
    assert verify_password("123456", usuario.senha_hash)


def test_seed_is_idempotent(db_session, usuarios):
    assert seed_usuarios(db_session) == 0


def test_seed_skips_existing_email(db_session):
    db_session.add(
        Usuario(
            id=500,
            nome="Outra Pessoa",
            email="girlene-n@zaminebrasil.com",
            senha_hash=get_password_hash("x"),
            pontos=0,
            conquistas=[],
            role="funcionario",
        )
    )
    db_session.commit()

    seed_usuarios(db_session)
    assert db_session.get(Usuario, 2) is None


def test_list_usuarios(client, usuarios):
    response = client.get("/api/usuarios")
    assert response.status_code == 200
    data = response.json()["data"]
    # the two managers that share an e-mail collapse into one row
    assert len(data) == len(USUARIOS_PADRAO) - 1
    nomes = [item["nome"] for item in data]
    assert nomes == sorted(nomes)
    assert all("senhaHash" not in item for item in data)


def test_reset_password(client):
    response = client.post("/api/auth/reset-password", json={"email": "ranielly-s@zaminebrasil.com"})
    assert response.status_code == 200
    assert response.json()["success"] is True

    missing = client.post("/api/auth/reset-password", json={})
    assert missing.status_code == 400
    assert missing.json()["error"] == "Email e obrigatorio"


def test_register(client):
    response = client.post(
        "/api/auth/register",
        json={"nome": "Nova Pessoa", "email": "nova@zaminebrasil.com", "role": "funcionario"},
    )
    assert response.status_code == 200
    assert response.json()["success"] is True

    missing = client.post("/api/auth/register", json={"nome": "Nova Pessoa"})
    assert missing.status_code == 400
    assert missing.json()["error"] == "Todos os campos sao obrigatorios"
