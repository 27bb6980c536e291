# ===================================================================
# 1. IMPORTS
# ===================================================================
import logging
from typing import Any, cast
from collections.abc import Callable

from nicegui import ui, app, run
from nicegui.events import UploadEventArguments

# Local application imports
from .api_client import ApiError, DocumentType, MasterOption, OnboardingGateway, RestOnboardingClient
from .payloads import PayloadError, build_payload
from .schema import (
    AppSchema, FormField, DataframeConfig, StepDefinition, OnboardingStep,
    STEP_TITLES, STEP_ICONS, FIRST_STEP
)
from .sequencer import Err, SequencerController, StepState
from .settings import Settings
from .step_definitions import STEPS_BY_ID, execute_step_validators
from .validation import format_indian_phone_number

settings = Settings.from_env()

logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong. Please reload the page and try again."

SUCCESS_MESSAGES: dict[int, str] = {
    OnboardingStep.PERSONAL: "Personal info saved successfully!",
    OnboardingStep.JOB_DETAILS: "Job details saved!",
    OnboardingStep.CONTACT: "Contact info saved successfully!",
    OnboardingStep.BANK: "Bank info saved successfully!",
}

# Lookups the job details step needs before it can be filled in
JOB_DETAIL_MASTERS: tuple[str, ...] = ('companies', 'departments', 'designations', 'leave-policies', 'shifts', 'roles')

# ===================================================================
# 2. BACKEND WIRING
# ===================================================================

def create_gateway() -> OnboardingGateway:
    return RestOnboardingClient(settings.api_base_url, settings.api_token, settings.api_timeout)

# Swapped out in tests / demos
gateway_factory: Callable[[], OnboardingGateway] = create_gateway

def handle_unexpected_exception(exception: Exception) -> None:
    """Last-resort handler: log it and show a generic message, without recovering state."""
    logger.error(f"Unexpected error: {exception}", exc_info=exception)
    if not ui.context.slot_stack:
        return  # raised outside of any page
    ui.notify(GENERIC_FAILURE_MESSAGE, type='negative', multi_line=True)

app.on_exception(handle_unexpected_exception)

# ===================================================================
# 3. UI CREATION HELPERS
# ===================================================================

ChangeHandler = Callable[[str, Any], Any]

def _select_options(f: FormField, lookups: dict[str, list[MasterOption]]) -> list[str] | dict[Any, str]:
    if f.master:
        return {option.id: option.name for option in lookups.get(f.master, [])}
    return f.options or []

def _with_current_value(options: list[str] | dict[Any, str], value: Any) -> list[str] | dict[Any, str]:
    """Keeps a stored value selectable even if its lookup has not loaded."""
    values = value if isinstance(value, list) else [value]
    missing = [v for v in values if v not in (None, '') and v not in options]
    if not missing:
        return options
    merged: dict[Any, str] = dict(options) if isinstance(options, dict) else {o: o for o in options}
    merged.update({v: str(v) for v in missing})
    return merged

def _bind(f: FormField, data_source: dict[str, Any], on_change: ChangeHandler | None,
          blank_as_none: bool = False) -> Callable[[Any], Any]:
    def handler(e: Any) -> Any:
        value = e.value
        if blank_as_none and value == '':
            value = None
        data_source[f.key] = value
        if on_change:
            return on_change(f.key, value)
        return None
    return handler

def _create_text_input(f: FormField, v: Any, data_source: dict[str, Any], on_change: ChangeHandler | None) -> ui.input:
    """Creates a standard text input field bound to the data source."""
    return ui.input(label=f.label, value=v or '', placeholder=f.placeholder or None,
                    on_change=_bind(f, data_source, on_change))

def _create_email_input(f: FormField, v: Any, data_source: dict[str, Any], on_change: ChangeHandler | None) -> ui.input:
    return _create_text_input(f, v, data_source, on_change).props('type=email')

def _create_date_input(f: FormField, v: Any, data_source: dict[str, Any], on_change: ChangeHandler | None) -> ui.input:
    """A native date picker; the value is stored as YYYY-MM-DD."""
    return ui.input(label=f.label, value=v or '',
                    on_change=_bind(f, data_source, on_change, blank_as_none=True)).props('type=date stack-label')

def _create_textarea_input(f: FormField, v: Any, data_source: dict[str, Any], on_change: ChangeHandler | None) -> ui.textarea:
    """Creates a multi-line text area bound to the data source."""
    return ui.textarea(label=f.label, value=v or '', on_change=_bind(f, data_source, on_change))

def create_field(field_definition: FormField,
                 data_source: dict[str, Any],
                 errors: dict[str, str],
                 form_attempted: bool,
                 lookups: dict[str, list[MasterOption]] | None = None,
                 error_key_prefix: str = "",
                 on_change: ChangeHandler | None = None) -> None:
    """
    Creates a UI element based on a FormField definition, bound to
    `data_source`. Select options come from the field itself or from the
    named master lookup.
    """
    if field_definition.key not in data_source:
        data_source[field_definition.key] = field_definition.default_value
    current_value = data_source.get(field_definition.key)

    error_key = f"{error_key_prefix}{field_definition.key}"
    error_message: str | None = errors.get(error_key) if form_attempted else None

    with ui.column().classes('w-full no-wrap q-mb-sm'):
        if field_definition.ui_type in ('select', 'multiselect'):
            multiple = field_definition.ui_type == 'multiselect'
            options = _with_current_value(_select_options(field_definition, lookups or {}), current_value)
            element: Any = ui.select(
                options=options, label=field_definition.label,
                value=current_value if not multiple else list(current_value or []),
                multiple=multiple, clearable=not multiple,
                on_change=_bind(field_definition, data_source, on_change),
            )
            if multiple:
                element.props('use-chips')
        else:
            creator_map: dict[str, Callable[..., Any]] = {
                'text': _create_text_input,
                'email': _create_email_input,
                'date': _create_date_input,
                'textarea': _create_textarea_input,
            }
            creator = creator_map.get(field_definition.ui_type)
            if not creator:
                raise ValueError(f"Unsupported UI type: {field_definition.ui_type}")
            element = creator(field_definition, current_value, data_source, on_change)

        props_list: list[str] = ['outlined', 'dense']
        if field_definition.max_length:
            props_list.append(f"maxlength={field_definition.max_length}")
        if error_message:
            props_list.append(f'error-message="{error_message}"')
            props_list.append('error')
        element.props(' '.join(props_list)).classes('w-full')

# ===================================================================
# 4. THE WIZARD (one per page visit)
# ===================================================================

class OnboardingWizard:
    """
    Renders the wizard for one browser tab. The controller, and with it the
    whole onboarding session, lives exactly as long as this object.
    """

    def __init__(self, controller: SequencerController) -> None:
        self.controller = controller
        self.session = controller.session
        self.form: dict[str, Any] = controller.form_values(FIRST_STEP)
        self.errors: dict[str, str] = {}
        self.form_attempted = False
        self.lookups: dict[str, list[MasterOption]] = {}
        self.document_types: list[DocumentType] | None = None
        self.document_types_failed = False
        self.upload_status: dict[int, tuple[str, str]] = {}

        self.sidebar = ui.refreshable(self._render_sidebar)
        self.content = ui.refreshable(self._render_content)
        self.documents = ui.refreshable(self._render_document_list)

    # --- Data loading ---
    async def load_lookups(self) -> None:
        gateway = self.controller.gateway
        for name in JOB_DETAIL_MASTERS:
            try:
                self.lookups[name] = await run.io_bound(gateway.list_master, name, 1, settings.master_page_size)
            except ApiError as e:
                self.lookups[name] = []
                ui.notify(e.message, type='negative')
        try:
            self.document_types = await run.io_bound(gateway.list_document_types, 1, 100)
        except ApiError as e:
            self.document_types = []
            self.document_types_failed = True
            ui.notify(e.message, type='negative')
        self.content.refresh()

    async def _load_managers(self) -> None:
        company_id = self.form.get('company_id')
        department_id = self.form.get('department_id')
        self.form['reporting_to'] = None
        if not (company_id and department_id):
            self.lookups['managers'] = []
        else:
            try:
                self.lookups['managers'] = await run.io_bound(
                    self.controller.gateway.list_managers, company_id, department_id)
            except ApiError as e:
                self.lookups['managers'] = []
                ui.notify(e.message, type='negative')
        self.content.refresh()

    async def _on_field_change(self, key: str, value: Any) -> None:
        if key in ('company_id', 'department_id'):
            await self._load_managers()
        elif key == 'status':
            # Status-dependent date fields appear or disappear
            self.content.refresh()

    # --- Navigation ---
    def _show_active_step(self) -> None:
        self.form = self.controller.form_values(self.session.active_step)
        self.errors = {}
        self.form_attempted = False
        self.sidebar.refresh()
        self.content.refresh()

    def go_to(self, step: int) -> None:
        if self.controller.go_to_step(step):
            self._show_active_step()

    async def _handle_step_confirmation(self, button: ui.button) -> None:
        button.disable()
        try:
            step = self.session.active_step
            all_valid, new_errors = execute_step_validators(STEPS_BY_ID[step], self.form)
            self.form_attempted = True
            self.errors = new_errors
            if not all_valid:
                for error_message in new_errors.values():
                    ui.notify(error_message, type='negative', multi_line=True)
                self.content.refresh()
                return

            try:
                payload = build_payload(step, self.form)
            except PayloadError as e:
                ui.notify(str(e), type='negative')
                return

            result = await run.io_bound(self.controller.submit_step, step, payload)
            if result is None:
                return  # app is shutting down
            if isinstance(result, Err):
                ui.notify(result.error.message, type='negative', multi_line=True)
                return

            ui.notify(SUCCESS_MESSAGES[step], type='positive')
            self._show_active_step()
        finally:
            button.enable()

    # --- Sidebar (progress tracker) ---
    def _render_sidebar(self) -> None:
        icons = {StepState.COMPLETED: 'check_circle', StepState.CURRENT: 'radio_button_checked',
                 StepState.PENDING: 'radio_button_unchecked'}
        with ui.column().classes('w-full q-gutter-xs'):
            for step, state in self.controller.progress():
                is_active = step == self.session.active_step
                button = ui.button(STEP_TITLES[step], icon=STEP_ICONS[step],
                                   on_click=lambda _, s=step: self.go_to(s))
                button.props(f"flat align=left no-caps {'color=primary' if is_active else 'color=grey-8'}").classes('w-full')
                if not self.controller.can_go_to(step):
                    button.disable()
                with button:
                    ui.space()
                    ui.icon(icons[state], color='positive' if state == StepState.COMPLETED else 'grey-5')

        personal = self.session.step_payload.payload(OnboardingStep.PERSONAL)
        if personal is not None:
            ui.separator().classes('q-my-md')
            ui.label(f"{personal.first_name} {personal.last_name}").classes('text-bold')
            ui.label(format_indian_phone_number(personal.personal_phone_no)).classes('text-caption text-grey-7')

    # --- Step rendering ---
    def _render_content(self) -> None:
        """Decides which renderer the active step needs."""
        step_def = STEPS_BY_ID.get(self.session.active_step)
        if not step_def:
            ui.label(f"Invalid step ({self.session.active_step})").classes('text-negative text-h6')
            return
        ui.label(step_def['title']).classes('text-h6 q-mb-xs')
        ui.markdown(step_def['subtitle'])
        if step_def['id'] == OnboardingStep.DOCUMENTS:
            self._render_documents_step()
        else:
            self._render_form_step(step_def)

    def _render_form_step(self, step_def: StepDefinition) -> None:
        with ui.grid(columns=2).classes('w-full'):
            for field_conf in step_def.get('fields', []):
                field = field_conf['field']
                if not field.is_visible(self.form):
                    continue
                create_field(field, self.form, self.errors, self.form_attempted,
                             lookups=self.lookups, on_change=self._on_field_change)

        for df_conf in step_def.get('dataframes', []):
            self._render_row_editor(df_conf)

        with ui.row().classes('w-full q-mt-lg justify-between items-center'):
            if step_def['id'] > FIRST_STEP:
                ui.button("← Back", on_click=lambda: self.go_to(step_def['id'] - 1)).props('flat color=grey')
            else:
                ui.label()
            confirm_button = ui.button("Save & Next →").props('color=primary unelevated')
            confirm_button.on('click', lambda: self._handle_step_confirmation(confirm_button))

    def _render_row_editor(self, df_conf: DataframeConfig) -> None:
        """
        Renders a dynamic list of cards (e.g. emergency contacts) from the
        row schema of the field.
        """
        main_field = df_conf['field']
        dataframe_key = main_field.key
        ui.label(main_field.label + 's').classes('text-subtitle1 q-mt-md q-mb-sm')

        if not main_field.row_schema:
            ui.label(f"Configuration error: '{dataframe_key}' has no row_schema.").classes('text-negative')
            return
        column_definitions = AppSchema.fields_of(main_field.row_schema)

        @ui.refreshable
        def render_cards() -> None:
            data_list = cast(list[dict[str, Any]], self.form.setdefault(dataframe_key, []))
            if not data_list:
                ui.label("No entries added yet.").classes("text-italic text-grey q-pa-md text-center full-width")
            for i, row_data in enumerate(data_list):
                with ui.card().classes('w-full q-mb-md').props("bordered flat"):
                    with ui.card_section().classes('w-full !py-2'):
                        with ui.row().classes('w-full justify-between items-center no-wrap'):
                            ui.label(f"{main_field.label} #{i + 1}").classes('text-bold text-body1')
                            ui.button(icon='delete_outline',
                                      on_click=lambda _, idx=i: (data_list.pop(idx), render_cards.refresh()),
                                      color='grey-6').props('flat dense round padding=xs')
                    ui.separator()
                    with ui.card_section():
                        with ui.grid(columns=2).classes('w-full'):
                            for col_field_def in column_definitions:
                                create_field(col_field_def, row_data, self.errors, self.form_attempted,
                                             error_key_prefix=f"{dataframe_key}_{i}_")

        def add_new_row() -> None:
            data_list: list[dict[str, Any]] = self.form.setdefault(dataframe_key, [])
            data_list.append(AppSchema.blank_row(cast(type, main_field.row_schema)))
            render_cards.refresh()

        render_cards()
        ui.button(f"Add {main_field.label}", on_click=add_new_row, icon='add').classes('q-mt-sm').props('outline color=primary')

    # --- Documents step ---
    def _render_documents_step(self) -> None:
        if self.document_types is None:
            ui.label("Loading document types...").classes('text-grey')
            return

        self.documents()

        with ui.row().classes('w-full q-mt-lg justify-between items-center'):
            ui.button("← Back", on_click=lambda: self.go_to(OnboardingStep.BANK)).props('flat color=grey')
            complete_button = ui.button("Complete Onboarding").props('color=primary unelevated')
            complete_button.on('click', lambda: self._handle_completion(complete_button))
            if self.document_types_failed:
                # Mandatory documents are unknown, so completion cannot be checked
                complete_button.disable()

    def _render_document_list(self) -> None:
        for doc_type in self.document_types or []:
            status, file_name = self.upload_status.get(doc_type.id, ('idle', ''))
            with ui.card().classes('w-full q-mb-sm').props('bordered flat'):
                with ui.row().classes('w-full items-center justify-between no-wrap'):
                    with ui.column().classes('q-gutter-none'):
                        title = f"{doc_type.name} *" if doc_type.is_mandatory else doc_type.name
                        ui.label(title).classes('text-bold')
                        ui.label(doc_type.description or "Upload the relevant document.").classes('text-caption text-grey-7')
                    if status == 'success':
                        with ui.row().classes('items-center no-wrap'):
                            ui.icon('check_circle', color='positive')
                            ui.label(file_name).classes('text-caption')
                            ui.button(icon='sync', on_click=lambda _, dt=doc_type: self._change_file(dt)) \
                                .props('flat dense round').tooltip('Change file')
                    elif status == 'uploading':
                        ui.spinner(size='md')
                    else:
                        with ui.column().classes('items-end'):
                            if status == 'error':
                                ui.label("Upload failed").classes('text-negative text-caption')
                            ui.upload(
                                label="Retry" if status == 'error' else "Upload",
                                auto_upload=True, max_files=1,
                                on_upload=lambda e, dt=doc_type: self._handle_upload(dt, e),
                            ).props('flat bordered dense').classes('w-64')

    def _change_file(self, doc_type: DocumentType) -> None:
        # The next upload replaces the manifest entry, so nothing is deleted server-side
        self.upload_status[doc_type.id] = ('idle', '')
        self.documents.refresh()

    async def _handle_upload(self, doc_type: DocumentType, e: UploadEventArguments) -> None:
        self.upload_status[doc_type.id] = ('uploading', e.name)
        self.documents.refresh()
        content = e.content.read()
        result = await run.io_bound(self.controller.upload_document, doc_type.id, e.name, content, e.type or None)
        if result is None:
            return
        if isinstance(result, Err):
            self.upload_status[doc_type.id] = ('error', '')
            ui.notify(f"Failed to upload {doc_type.name}. {result.error.message}", type='negative', multi_line=True)
        else:
            self.upload_status[doc_type.id] = ('success', e.name)
            ui.notify(f"{doc_type.name} uploaded successfully!", type='positive')
        self.documents.refresh()

    async def _handle_completion(self, button: ui.button) -> None:
        button.disable()
        try:
            result = await run.io_bound(self.controller.complete_onboarding, self.document_types or [])
            if result is None:
                return
            if isinstance(result, Err):
                ui.notify(result.error.message, type='negative', multi_line=True)
                return
            ui.notify("Employee onboarding completed successfully!", type='positive')
            ui.navigate.to('/done')
        finally:
            button.enable()

    # --- Layout ---
    def build(self) -> None:
        with ui.row().classes('w-full no-wrap items-start q-pa-md q-gutter-md'):
            with ui.card().classes('q-pa-md shadow-2').style('width: 280px; min-width: 220px;'):
                self.sidebar()
            with ui.card().classes('q-pa-md shadow-4 col'):
                with ui.column().classes('w-full'):
                    self.content()

# ===================================================================
# 5. PAGE ROUTING
# ===================================================================

def _header(title: str) -> None:
    ui.query('body').style('background-color: #f0f2f5;')
    with ui.header(elevated=True).classes('bg-primary text-white q-pa-sm items-center'):
        ui.label(title).classes('text-h5')

@ui.page('/')
async def onboarding_page() -> None:
    _header("Create New Employee")
    gateway = gateway_factory()
    # One HTTP session per tab
    ui.context.client.on_disconnect(gateway.close)
    wizard = OnboardingWizard(SequencerController(gateway))
    wizard.build()
    await ui.context.client.connected()
    await wizard.load_lookups()

@ui.page('/done')
def done_page() -> None:
    _header("Create New Employee")
    with ui.card().classes('absolute-center items-center q-pa-lg'):
        ui.icon('task_alt', size='xl', color='positive')
        ui.label("Employee onboarding completed successfully!").classes('text-h6')
        ui.button("Onboard another employee", on_click=lambda: ui.navigate.to('/')).props('color=primary unelevated')

def main() -> None:
    ui.run(host='0.0.0.0', port=settings.port, title='HR Onboarding', reload=False)

if __name__ in {"__main__", "__mp_main__"}:
    main()
