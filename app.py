from flask import Flask, render_template, request, redirect, url_for, send_file, jsonify, flash, session
from datetime import datetime
import io
import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from auth import SupabaseAuth, get_auth_provider, role_required, user_role
from config import check_settings, load_settings, setup_logging
from errors import AuthError, ExportError, ValidationError
from export import export_filename, to_csv, to_xlsx
from forms import parse_submission
from stats import aggregate, available_years, filter_by_period, sort_by_count
from storage import ResponseStore, create_storage
from taxonomy import PILLARS

settings = load_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)
check_settings(settings)

app = Flask(__name__)
app.config.setdefault('MAX_CONTENT_LENGTH', 16 * 1024 * 1024)  # 16 MB
app.config.update(
    SECRET_KEY=settings.secret_key,
    SESSION_COOKIE_SAMESITE='Lax',
    APP_ENV=settings.env,
    TIMEZONE=settings.timezone,
    ALLOWED_ROLES=settings.allowed_roles,
)

MESES = [
    'Janeiro', 'Fevereiro', 'Março', 'Abril', 'Maio', 'Junho',
    'Julho', 'Agosto', 'Setembro', 'Outubro', 'Novembro', 'Dezembro',
]

EXPORT_FORMATS = {
    'xlsx': (to_xlsx, 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'),
    'csv': (to_csv, 'text/csv'),
}

# store e provedor ficam em app.extensions para que os testes injetem instâncias isoladas
app.extensions['response_store'] = ResponseStore(
    create_storage(settings.storage_backend, settings.data_dir, settings.database_url)
)
app.extensions['auth_provider'] = SupabaseAuth(
    settings.supabase_url, settings.supabase_anon_key, timeout=settings.auth_timeout
)
logger.info(f"Running in {settings.env} mode (storage: {settings.storage_backend})")


def get_store() -> ResponseStore:
    return app.extensions['response_store']


def app_timezone():
    name = app.config.get('TIMEZONE')
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"TIMEZONE inválido '{name}', usando UTC.")
        return None


def parse_period(args):
    """Lê ano/mes da query string; valores inválidos caem no padrão (ano atual, todos os meses)."""
    tz = app_timezone()
    year = args.get('ano', type=int) or datetime.now(tz).year
    month = args.get('mes', default=None, type=int)
    if month is not None and not 0 <= month <= 11:
        month = None
    return month, year


def dashboard_data(month, year):
    tz = app_timezone()
    all_responses = get_store().list()
    filtered = filter_by_period(all_responses, month, year, tz)
    stats = aggregate(filtered)
    years = available_years(all_responses, today=datetime.now(tz).date(), tz=tz)
    if year not in years:
        years = sorted(set(years) | {year}, reverse=True)
    return {
        'responses': filtered,
        'stats': stats,
        'available_years': years,
    }


@app.template_filter('data_hora')
def data_hora(value):
    tz = app_timezone()
    ts = value.astimezone(tz) if tz is not None else value
    return ts.strftime('%d/%m/%Y %H:%M')


@app.route("/", methods=["GET", "POST"])
def formulario():
    if request.method == "POST":
        try:
            draft = parse_submission(request.form)
        except ValidationError as e:
            return render_template(
                "formulario.html",
                pillars=PILLARS,
                errors=e.messages,
                values=request.form,
                selecionadas=request.form.getlist('selecoes'),
            ), 400

        get_store().save(draft)
        flash("Formulário enviado com sucesso! Obrigado pela sua participação.", "success")
        return redirect(url_for("formulario"))

    return render_template("formulario.html", pillars=PILLARS, errors=[], values={}, selecionadas=[])


@app.route("/api/respostas", methods=["POST"])
def criar_resposta():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"errors": ["Corpo JSON inválido."]}), 400
    try:
        draft = parse_submission(payload)
    except ValidationError as e:
        return jsonify({"errors": e.messages}), 400
    response = get_store().save(draft)
    return jsonify(response.to_dict()), 201


@app.route("/login", methods=["GET", "POST"])
def login():
    next_url = request.values.get('next') or url_for('dashboard')
    if not next_url.startswith('/') or next_url.startswith('//'):
        next_url = url_for('dashboard')

    if request.method == "POST":
        email = request.form.get("email", "").strip()
        password = request.form.get("password", "")
        provider = get_auth_provider()
        try:
            payload = provider.sign_in(email, password)
            access_token = payload.get("access_token", "")
            user = payload.get("user") or provider.get_user(access_token)
        except AuthError as e:
            logger.warning(f"Login falhou para '{email}': {e}")
            flash("E-mail ou senha inválidos.", "error")
            return render_template("login.html", next=next_url), 401

        role = user_role(user)
        if role not in app.config['ALLOWED_ROLES']:
            logger.warning(f"Usuário '{email}' sem papel permitido ({role}).")
            try:
                provider.sign_out(access_token)
            except AuthError as e:
                logger.warning(f"Logout no provedor falhou: {e}")
            flash("Você não tem permissão para acessar o painel.", "error")
            return render_template("login.html", next=next_url), 403

        session.clear()
        session['access_token'] = access_token
        session['email'] = user.get('email', email)
        session['role'] = role
        logger.info(f"Login de '{session['email']}' ({role}).")
        return redirect(next_url)

    return render_template("login.html", next=next_url)


@app.route("/logout", methods=["POST"])
def logout():
    access_token = session.get('access_token')
    if access_token:
        try:
            get_auth_provider().sign_out(access_token)
        except AuthError as e:
            # a sessão local é encerrada mesmo assim
            logger.warning(f"Logout no provedor falhou: {e}")
    session.clear()
    return redirect(url_for("login"))


@app.route("/admin")
@role_required()
def dashboard():
    month, year = parse_period(request.args)
    data = dashboard_data(month, year)
    stats = data['stats']
    return render_template(
        "dashboard.html",
        stats=stats,
        pillars=sort_by_count(stats.pillars),
        responses=list(reversed(data['responses'])),
        available_years=data['available_years'],
        selected_month=month,
        selected_year=year,
        meses=MESES,
    )


@app.route("/admin/dados")
@role_required(api=True)
def dados():
    """Atualização explícita do painel (substitui o polling periódico)."""
    month, year = parse_period(request.args)
    data = dashboard_data(month, year)
    payload = data['stats'].to_dict()
    payload['availableYears'] = data['available_years']
    payload['responses'] = [r.to_dict() for r in data['responses']]
    return jsonify(payload)


@app.route("/admin/limpar", methods=["POST"])
@role_required()
def limpar_dados():
    get_store().clear()
    flash("Dados limpos: todos os dados foram removidos.", "warning")
    return redirect(url_for("dashboard"))


@app.route("/admin/exportar")
@role_required()
def exportar_respostas():
    month, year = parse_period(request.args)
    formato = request.args.get('formato', 'xlsx')
    if formato not in EXPORT_FORMATS:
        return "Formato não suportado", 400

    back = url_for("dashboard", ano=year, mes=month)
    responses = dashboard_data(month, year)['responses']
    if not responses:
        flash("Nenhum dado para exportar: não há respostas para exportar.", "error")
        return redirect(back)

    builder, mimetype = EXPORT_FORMATS[formato]
    try:
        content = builder(responses, tz=app_timezone())
    except ExportError as e:
        logger.exception(f"Erro ao exportar respostas: {e}")
        flash("Erro ao exportar: ocorreu um erro ao gerar o arquivo.", "error")
        return redirect(back)

    logger.info(f"{len(responses)} resposta(s) exportada(s) em {formato}.")
    output = io.BytesIO(content)
    return send_file(output, mimetype=mimetype, as_attachment=True,
                     download_name=export_filename(month, year, formato))


if __name__ == "__main__":
    app.run(debug=settings.env == "dev")
