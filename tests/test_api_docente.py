from datetime import date, timedelta

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.core.calificaciones import CategoriaActividad, EstadoAsistencia
from app.models.asistencia import Asistencia
from app.models.calificacion import Calificacion
from app.models.estudiante import Estudiante
from app.models.inscripcion import EstadoInscripcion, Inscripcion

BASE = "/api/v1/docente"


def _calificar(db, estudiante_id, actividad_id, nota):
    db.add(Calificacion(estudiante_id=estudiante_id, actividad_id=actividad_id, nota=nota))
    db.commit()


def test_sin_token_401(client, curso):
    response = client.get(f"{BASE}/cursos")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_token_invalido_401(client, curso):
    response = client.get(f"{BASE}/cursos", headers={"Authorization": "Bearer basura"})
    assert response.status_code == 401


def test_estudiante_no_accede_a_rutas_de_docente(client, headers_estudiantes):
    response = client.get(f"{BASE}/cursos", headers=headers_estudiantes[0])
    assert response.status_code == 403


def test_mis_cursos(client, curso, headers_docente):
    response = client.get(f"{BASE}/cursos", headers=headers_docente)

    assert response.status_code == 200
    cursos = response.json()
    assert len(cursos) == 1
    assert cursos[0]["materia"] == "Programación I"
    assert cursos[0]["cantidad_estudiantes"] == 3


def test_cabecera_y_404(client, curso, headers_docente):
    response = client.get(f"{BASE}/cursos/{curso.paralelo.id}", headers=headers_docente)
    assert response.status_code == 200
    assert response.json()["codigo_paralelo"] == "SA"

    response = client.get(f"{BASE}/cursos/9999", headers=headers_docente)
    assert response.status_code == 404
    assert response.json()["detail"] == "Curso no encontrado"


def test_id_malformado_422(client, curso, headers_docente):
    response = client.get(f"{BASE}/cursos/abc/matriz", headers=headers_docente)
    assert response.status_code == 422


def test_matriz_de_calificaciones(client, db, curso, headers_docente, crear_actividad):
    pid = curso.paralelo.id
    individual = crear_actividad(pid, CategoriaActividad.INDIVIDUAL)
    grupal = crear_actividad(pid, CategoriaActividad.GRUPAL)
    medio = crear_actividad(pid, CategoriaActividad.MEDIO)
    final = crear_actividad(pid, CategoriaActividad.FINAL)

    ana, bruno, carla = curso.estudiantes
    _calificar(db, ana.id, individual.id, 18)
    _calificar(db, ana.id, grupal.id, 15)
    _calificar(db, ana.id, medio.id, 10)
    for actividad in (individual, grupal, medio, final):
        _calificar(db, carla.id, actividad.id, 20)
    for dia in (1, 2):
        db.add(
            Asistencia(
                fecha=date(2025, 9, dia),
                estado=EstadoAsistencia.ABSENT,
                inscripcion_id=curso.inscripciones[2].id,
            )
        )
    db.commit()

    response = client.get(f"{BASE}/cursos/{pid}/matriz", headers=headers_docente)

    assert response.status_code == 200
    matriz = response.json()
    assert matriz["materia"] == "Programación I"
    assert matriz["pesos"] == {"INDIVIDUAL": 7, "GRUPAL": 5, "MEDIO": 2, "FINAL": 6}
    assert [a["id"] for a in matriz["actividades"]] == [
        individual.id,
        grupal.id,
        medio.id,
        final.id,
    ]

    filas = matriz["estudiantes"]
    assert [f["nombre_completo"] for f in filas] == [
        "Ana Alvarez",
        "Bruno Benitez",
        "Carla Castro",
    ]
    assert filas[0]["total_final"] == 11.05
    assert filas[0]["estado"] == "SUSPENDED"
    assert filas[0]["notas"][str(individual.id)] == 18.0
    assert filas[0]["notas"][str(final.id)] is None
    assert filas[0]["desglose"]["INDIVIDUAL"] == 6.3
    assert filas[1]["total_final"] == 0.0
    assert filas[1]["estado"] == "FAILED"
    assert filas[2]["porcentaje_asistencia"] == 0.0
    assert filas[2]["estado"] == "FAILED_BY_ATTENDANCE"

    assert matriz["estadisticas"] == {
        "total_estudiantes": 3,
        "aprobados": 0,
        "suspensos": 1,
        "reprobados": 1,
        "reprobados_por_asistencia": 1,
        "promedio_curso": 10.35,
    }

    response = client.get(f"{BASE}/cursos/{pid}/estadisticas", headers=headers_docente)
    assert response.json()["promedio_curso"] == 10.35


def test_matriz_incluye_inscripciones_sin_paralelo(client, db, curso, headers_docente):
    nuevo = Estudiante(registro="EST009", nombre="Diego", apellido="Zapata")
    db.add(nuevo)
    db.commit()

    db.add(
        Inscripcion(
            estudiante_id=nuevo.id,
            materia_id=curso.materia.id,
            paralelo_id=None,
            estado=EstadoInscripcion.TAKING,
        )
    )
    db.commit()

    response = client.get(
        f"{BASE}/cursos/{curso.paralelo.id}/matriz", headers=headers_docente
    )
    nombres = [f["nombre_completo"] for f in response.json()["estudiantes"]]
    assert "Diego Zapata" in nombres


def test_matriz_de_curso_sin_actividades(client, curso, headers_docente):
    response = client.get(
        f"{BASE}/cursos/{curso.paralelo.id}/matriz", headers=headers_docente
    )

    assert response.status_code == 200
    matriz = response.json()
    assert matriz["actividades"] == []
    assert all(f["total_final"] == 0.0 for f in matriz["estudiantes"])


def test_crear_actividad(client, curso, headers_docente):
    manana = date.today() + timedelta(days=1)
    response = client.post(
        f"{BASE}/cursos/{curso.paralelo.id}/actividades",
        json={"titulo": "Práctico 1", "fecha": manana.isoformat()},
        headers=headers_docente,
    )

    assert response.status_code == 201
    actividad = response.json()
    assert actividad["categoria"] == "INDIVIDUAL"
    assert actividad["fecha_limite"] == f"{manana.isoformat()}T07:00:00"

    response = client.get(
        f"{BASE}/cursos/{curso.paralelo.id}/actividades", headers=headers_docente
    )
    assert [a["titulo"] for a in response.json()] == ["Práctico 1"]


def test_crear_actividad_en_fecha_pasada(client, curso, headers_docente):
    ayer = date.today() - timedelta(days=1)
    response = client.post(
        f"{BASE}/cursos/{curso.paralelo.id}/actividades",
        json={"titulo": "Tarde", "fecha": ayer.isoformat(), "categoria": "FINAL"},
        headers=headers_docente,
    )
    assert response.status_code == 400


def test_crear_actividad_sin_titulo(client, curso, headers_docente):
    response = client.post(
        f"{BASE}/cursos/{curso.paralelo.id}/actividades",
        json={"titulo": "", "fecha": date.today().isoformat()},
        headers=headers_docente,
    )
    assert response.status_code == 422


def test_eliminar_actividad_borra_calificaciones(
    client, db, curso, headers_docente, crear_actividad
):
    actividad = crear_actividad(curso.paralelo.id, CategoriaActividad.GRUPAL)
    _calificar(db, curso.estudiantes[0].id, actividad.id, 12)

    response = client.delete(f"{BASE}/actividades/{actividad.id}", headers=headers_docente)
    assert response.status_code == 200

    assert db.query(Calificacion).count() == 0

    response = client.delete(f"{BASE}/actividades/{actividad.id}", headers=headers_docente)
    assert response.status_code == 404


def test_registrar_nota_es_idempotente(client, db, curso, headers_docente, crear_actividad):
    actividad = crear_actividad(curso.paralelo.id, CategoriaActividad.INDIVIDUAL)
    url = f"{BASE}/actividades/{actividad.id}/calificaciones"
    estudiante_id = curso.estudiantes[0].id

    primera = client.post(
        url, json={"estudiante_id": estudiante_id, "nota": 12}, headers=headers_docente
    )
    segunda = client.post(
        url,
        json={"estudiante_id": estudiante_id, "nota": 17, "retroalimentacion": "Mejoró"},
        headers=headers_docente,
    )

    assert primera.status_code == 200
    assert segunda.status_code == 200
    assert primera.json()["id"] == segunda.json()["id"]

    db.expire_all()
    registros = db.query(Calificacion).all()
    assert len(registros) == 1
    assert registros[0].nota == 17
    assert registros[0].retroalimentacion == "Mejoró"


def test_borrar_nota_con_null(client, db, curso, headers_docente, crear_actividad):
    actividad = crear_actividad(curso.paralelo.id, CategoriaActividad.INDIVIDUAL)
    url = f"{BASE}/actividades/{actividad.id}/calificaciones"
    estudiante_id = curso.estudiantes[0].id

    response = client.post(
        url, json={"estudiante_id": estudiante_id, "nota": 12}, headers=headers_docente
    )
    assert response.status_code == 200

    response = client.post(
        url, json={"estudiante_id": estudiante_id, "nota": None}, headers=headers_docente
    )
    assert response.status_code == 200
    assert response.json()["nota"] is None

    db.expire_all()
    registros = db.query(Calificacion).all()
    assert len(registros) == 1
    assert registros[0].nota is None

    response = client.get(f"{BASE}/cursos/{curso.paralelo.id}/matriz", headers=headers_docente)
    fila = response.json()["estudiantes"][0]
    assert fila["notas"][str(actividad.id)] is None
    assert fila["total_final"] == 0.0


def test_nota_obligatoria_422(client, curso, headers_docente, crear_actividad):
    actividad = crear_actividad(curso.paralelo.id, CategoriaActividad.INDIVIDUAL)
    response = client.post(
        f"{BASE}/actividades/{actividad.id}/calificaciones",
        json={"estudiante_id": curso.estudiantes[0].id},
        headers=headers_docente,
    )
    assert response.status_code == 422


def test_nota_fuera_de_rango_422(client, curso, headers_docente, crear_actividad):
    actividad = crear_actividad(curso.paralelo.id, CategoriaActividad.INDIVIDUAL)
    url = f"{BASE}/actividades/{actividad.id}/calificaciones"

    for nota in (21, -1):
        response = client.post(
            url,
            json={"estudiante_id": curso.estudiantes[0].id, "nota": nota},
            headers=headers_docente,
        )
        assert response.status_code == 422


def test_registrar_nota_404(client, db, curso, headers_docente, crear_actividad):
    response = client.post(
        f"{BASE}/actividades/9999/calificaciones",
        json={"estudiante_id": curso.estudiantes[0].id, "nota": 10},
        headers=headers_docente,
    )
    assert response.status_code == 404

    ajeno = Estudiante(registro="EST999", nombre="Eva", apellido="Ajena")
    db.add(ajeno)
    db.commit()

    actividad = crear_actividad(curso.paralelo.id, CategoriaActividad.INDIVIDUAL)
    response = client.post(
        f"{BASE}/actividades/{actividad.id}/calificaciones",
        json={"estudiante_id": ajeno.id, "nota": 10},
        headers=headers_docente,
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Estudiante no encontrado"


def test_planilla_de_actividad(client, db, curso, headers_docente, crear_actividad):
    actividad = crear_actividad(curso.paralelo.id, CategoriaActividad.MEDIO, "Parcial")
    _calificar(db, curso.estudiantes[1].id, actividad.id, 14)

    response = client.get(f"{BASE}/actividades/{actividad.id}", headers=headers_docente)

    assert response.status_code == 200
    planilla = response.json()
    assert planilla["titulo"] == "Parcial"
    assert [e["tiene_nota"] for e in planilla["estudiantes"]] == [False, True, False]
    assert planilla["estudiantes"][1]["nota"] == 14


def test_hoja_de_asistencia_por_defecto(client, curso, headers_docente):
    response = client.get(
        f"{BASE}/asistencia",
        params={"paralelo_id": curso.paralelo.id, "fecha": "2025-09-01"},
        headers=headers_docente,
    )

    assert response.status_code == 200
    filas = response.json()["estudiantes"]
    assert len(filas) == 3
    assert all(f["estado"] == "PRESENT" and not f["registrado"] for f in filas)


def test_guardar_asistencia(client, db, curso, headers_docente):
    ayer = date.today() - timedelta(days=1)
    ids = [i.id for i in curso.inscripciones]
    payload = {
        "paralelo_id": curso.paralelo.id,
        "fecha": ayer.isoformat(),
        "registros": [
            {"inscripcion_id": ids[0], "estado": "PRESENT"},
            {"inscripcion_id": ids[1], "estado": "LATE"},
            {"inscripcion_id": ids[2], "estado": "ABSENT"},
        ],
    }

    response = client.post(f"{BASE}/asistencia", json=payload, headers=headers_docente)
    assert response.status_code == 200
    assert response.json()["guardados"] == 3

    # Volver a guardar el mismo día actualiza en lugar de duplicar
    payload["registros"][2]["estado"] = "EXCUSED"
    response = client.post(f"{BASE}/asistencia", json=payload, headers=headers_docente)
    assert response.status_code == 200

    db.expire_all()
    assert db.query(Asistencia).count() == 3

    response = client.get(
        f"{BASE}/asistencia",
        params={"paralelo_id": curso.paralelo.id, "fecha": ayer.isoformat()},
        headers=headers_docente,
    )
    filas = response.json()["estudiantes"]
    assert [f["estado"] for f in filas] == ["PRESENT", "LATE", "EXCUSED"]
    assert all(f["registrado"] for f in filas)


def test_asistencia_en_fecha_futura(client, db, curso, headers_docente):
    manana = date.today() + timedelta(days=1)
    response = client.post(
        f"{BASE}/asistencia",
        json={
            "paralelo_id": curso.paralelo.id,
            "fecha": manana.isoformat(),
            "registros": [{"inscripcion_id": curso.inscripciones[0].id, "estado": "PRESENT"}],
        },
        headers=headers_docente,
    )

    assert response.status_code == 400
    assert db.query(Asistencia).count() == 0


def test_asistencia_con_inscripcion_ajena_no_guarda_nada(client, db, curso, headers_docente):
    response = client.post(
        f"{BASE}/asistencia",
        json={
            "paralelo_id": curso.paralelo.id,
            "fecha": date.today().isoformat(),
            "registros": [
                {"inscripcion_id": curso.inscripciones[0].id, "estado": "PRESENT"},
                {"inscripcion_id": 9999, "estado": "ABSENT"},
            ],
        },
        headers=headers_docente,
    )

    assert response.status_code == 400
    assert db.query(Asistencia).count() == 0


def test_asistencia_con_fallo_al_confirmar_500(client, db, curso, headers_docente, monkeypatch):
    def commit_que_falla(self):
        self.flush()
        raise OperationalError("COMMIT", {}, Exception("disco lleno"))

    monkeypatch.setattr(Session, "commit", commit_que_falla)
    ayer = date.today() - timedelta(days=1)

    response = client.post(
        f"{BASE}/asistencia",
        json={
            "paralelo_id": curso.paralelo.id,
            "fecha": ayer.isoformat(),
            "registros": [
                {"inscripcion_id": i.id, "estado": "PRESENT"} for i in curso.inscripciones
            ],
        },
        headers=headers_docente,
    )

    assert response.status_code == 500
    assert response.json() == {"detail": "Error interno del servidor"}
    assert "disco" not in response.text

    monkeypatch.undo()
    db.expire_all()
    assert db.query(Asistencia).count() == 0


def test_asistencia_con_estado_desconocido_422(client, curso, headers_docente):
    response = client.post(
        f"{BASE}/asistencia",
        json={
            "paralelo_id": curso.paralelo.id,
            "fecha": date.today().isoformat(),
            "registros": [{"inscripcion_id": curso.inscripciones[0].id, "estado": "SICK"}],
        },
        headers=headers_docente,
    )
    assert response.status_code == 422
