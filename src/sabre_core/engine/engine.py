"""Sabre engine - compiles templates once and renders them on demand."""

import time
import typing
from collections.abc import Callable, Iterable, Mapping
from pathlib import PurePath
from typing import Any

from opentelemetry.trace import Tracer

from sabre_core.cache import ArtifactCache, compute_fingerprint, type_name
from sabre_core.compiler import (
    DEFAULT_EXTENSION,
    CompilationResult,
    CompiledArtifact,
    LanguageProvider,
    default_providers,
    forget_source,
    normalize_extension,
)
from sabre_core.config import SabreConfig
from sabre_core.errors import Diagnostic, SabreError, create_error
from sabre_core.logging import SabreLogger
from sabre_core.telemetry import instrument_compile, instrument_render
from sabre_core.template import ExecutionContext, Template, ViewBag
from sabre_core.types import ModelKind

TemplateResolver = Callable[[str], Template | None]

ANONYMOUS_STEM = "template"


def model_kind_for(model_type: Any) -> ModelKind:
    """Mappings are exposed by key, everything else as the bound object."""
    origin = typing.get_origin(model_type) or model_type
    if isinstance(origin, type) and issubclass(origin, Mapping):
        return ModelKind.DYNAMIC
    return ModelKind.TYPED


class Sabre:
    """
    Template engine.

    Compile pipeline:
    1. Resolve file name, language provider and model type
    2. Compute the cache key (logical name, or content fingerprint)
    3. On a cache miss: generate source, compile it, store the artifact
    4. Create a fresh template instance from the artifact

    Example:
        >>> sabre = Sabre()
        >>> sabre.parse('write_literal("<p>Hello ")\\nwrite(model["name"])', {"name": "Ada"})
        '<p>Hello Ada'
    """

    def __init__(
        self,
        template_base: type[Template] = Template,
        providers: Iterable[LanguageProvider] | None = None,
        default_file_extension: str = DEFAULT_EXTENSION,
        namespaces: Iterable[str] | None = None,
        module_references: Iterable[str] | None = None,
        enable_debug: bool = False,
        cache: ArtifactCache[CompiledArtifact] | None = None,
        template_resolver: TemplateResolver | None = None,
        logger: SabreLogger | None = None,
        tracer: Tracer | None = None,
    ):
        """Initialize engine.

        Args:
            template_base: Base class of every compiled template
            providers: Language providers (default: code block provider
                for ``.pyt`` and the default extension)
            default_file_extension: Extension used when no file name is given
            namespaces: Modules star-imported into generated templates
            module_references: Modules imported into every template module
            enable_debug: Keep generated source on instances and in linecache
            cache: Artifact cache (default: unbounded, retry on failure)
            template_resolver: Fallback lookup for find_template()
            logger: Optional logger
            tracer: Optional OpenTelemetry tracer
        """
        if not (isinstance(template_base, type) and issubclass(template_base, Template)):
            raise TypeError(f"template_base must be a Template subclass, got {template_base!r}")

        self.template_base = template_base
        self.default_file_extension = default_file_extension
        if providers is None:
            extensions = dict.fromkeys([DEFAULT_EXTENSION, self.default_file_extension])
            providers = default_providers(template_base, extensions)
        self._providers = list(providers)
        self.namespaces = list(namespaces or [])
        self.module_references = list(module_references or [])
        self.enable_debug = enable_debug
        self._cache: ArtifactCache[CompiledArtifact] = cache if cache is not None else ArtifactCache()
        self._cache.on_discard(self._forget_artifact_source)
        self.template_resolver = template_resolver
        self._logger = logger
        self._tracer = tracer

    @classmethod
    def from_config(cls, config: SabreConfig | None = None, **kwargs: Any) -> "Sabre":
        """Build an engine from configuration.

        Args:
            config: Loaded configuration (default: SabreConfig())
            **kwargs: Constructor arguments that override the configuration

        Returns:
            Configured Sabre instance
        """
        config = config or SabreConfig()
        options: dict[str, Any] = {
            "default_file_extension": config.engine.default_file_extension,
            "namespaces": config.engine.namespaces,
            "module_references": config.engine.module_references,
            "enable_debug": config.engine.enable_debug,
            "cache": ArtifactCache(
                max_entries=config.cache.max_entries,
                failure_policy=config.cache.failure_policy,
            ),
        }
        if config.logging.enabled:
            options["logger"] = SabreLogger(config.logging.to_log_config())
        options.update(kwargs)
        return cls(**options)

    @property
    def cache(self) -> ArtifactCache[CompiledArtifact]:
        return self._cache

    @property
    def providers(self) -> list[LanguageProvider]:
        return list(self._providers)

    @property
    def default_file_extension(self) -> str:
        return self._default_file_extension

    @default_file_extension.setter
    def default_file_extension(self, value: str) -> None:
        extension = normalize_extension(value or "")
        if not extension:
            raise create_error("FILE_EXTENSION_EMPTY", file_name=value)
        self._default_file_extension = extension

    # ─────────────────────────────────────────────────────────────────
    # Providers
    # ─────────────────────────────────────────────────────────────────

    def register_provider(self, provider: LanguageProvider) -> None:
        """Register a provider. Later registrations win for shared extensions."""
        self._providers.insert(0, provider)

    def find_language_provider(self, extension: str) -> LanguageProvider | None:
        """Find the provider handling a file extension.

        Args:
            extension: Extension with or without the leading dot

        Returns:
            Matching provider, or None
        """
        extension = normalize_extension(extension)
        for provider in self._providers:
            if provider.handles(extension):
                return provider
        return None

    # ─────────────────────────────────────────────────────────────────
    # Compile
    # ─────────────────────────────────────────────────────────────────

    def parse(
        self,
        content: str,
        model: Any = None,
        view_bag: ViewBag | Mapping[str, Any] | None = None,
    ) -> str:
        """Compile (or reuse) a template and render it once.

        The model type is taken from the model (a dict when no model is
        given) unless the template base fixes it.

        Args:
            content: Template text
            model: Model bound to the template
            view_bag: Initial view data

        Returns:
            Rendered output
        """
        model_type = None
        if self.template_base.MODEL_TYPE is None:
            model_type = dict if model is None else type(model)

        instance = self.compile(content, model_type=model_type)
        instance.model = model
        return self.render(instance, view_bag=view_bag)

    def compile(
        self,
        content: str,
        name: str | None = None,
        file_name: str | None = None,
        model_type: Any = None,
    ) -> Template:
        """Compile a template and return a new instance of it.

        With a name, the artifact is cached under that name and can be
        used as a layout or include; later compiles with the same name
        reuse it regardless of content.

        Args:
            content: Template text
            name: Logical template name
            file_name: File name selecting the language provider
            model_type: Model type (default: object, or the base's MODEL_TYPE)

        Returns:
            New template instance

        Raises:
            UsageError: Empty content, bad extension, model type conflict
            GenerationError: The generator rejected the template
            CompilationError: The generated source did not compile
        """
        artifact = self.get_or_compile(content, name, file_name, model_type)
        return self.new_instance(artifact)

    def get_or_compile(
        self,
        content: str,
        name: str | None = None,
        file_name: str | None = None,
        model_type: Any = None,
    ) -> CompiledArtifact:
        """Return the cached artifact for a template, compiling it on first use.

        See compile() for arguments and errors.
        """
        if not content or not content.strip():
            raise create_error("TEMPLATE_CONTENT_EMPTY", template_name=name)

        if not file_name or not file_name.strip():
            file_name = (name or ANONYMOUS_STEM) + self.default_file_extension

        extension = PurePath(file_name).suffix
        if not extension:
            raise create_error("FILE_EXTENSION_EMPTY", file_name=file_name, template_name=name)

        provider = self.find_language_provider(extension)
        if provider is None:
            raise create_error("PROVIDER_NOT_FOUND", extension=extension, template_name=name)

        model_type = self._resolve_model_type(model_type)
        key = name or compute_fingerprint(content, file_name, model_type)

        compile_logger = self._logger.compile(key, name) if self._logger else None
        compiled = False

        def compile_fn() -> CompiledArtifact:
            nonlocal compiled
            compiled = True
            return self._generate_and_compile(
                key, name, content, file_name, model_type, provider, compile_logger
            )

        artifact = self._cache.get_or_compile(key, compile_fn)
        if not compiled and compile_logger:
            compile_logger.cache_hit()
        return artifact

    def _resolve_model_type(self, model_type: Any) -> Any:
        fixed = self.template_base.MODEL_TYPE
        if fixed is None:
            return object if model_type is None else model_type
        if model_type is not None and model_type is not fixed:
            raise create_error(
                "MODEL_TYPE_CONFLICT",
                model_type=type_name(model_type),
                template_base=type_name(self.template_base),
            )
        return fixed

    def _generate_and_compile(
        self,
        key: str,
        name: str | None,
        content: str,
        file_name: str,
        model_type: Any,
        provider: LanguageProvider,
        compile_logger: Any,
    ) -> CompiledArtifact:
        """Run one generate+compile cycle."""
        with instrument_compile(key, self._tracer, file_name) as span_attributes:
            start = time.perf_counter()
            if compile_logger:
                compile_logger.started(file_name)

            try:
                generation = provider.generator.generate(
                    content, file_name, type_name(model_type), self.namespaces
                )
                if not generation.success:
                    raise create_error(
                        "TEMPLATE_GENERATION_FAILED",
                        file_name=file_name,
                        template_name=name,
                        diagnostics=generation.diagnostics,
                    )

                compilation = provider.compiler.compile(
                    generation.generated_source,
                    self.module_references,
                    self.enable_debug,
                    name or file_name,
                )
                if compilation.success and not self._derives_from_base(compilation.template_class):
                    forget_source(compilation.source_filename)
                    compilation = CompilationResult(
                        success=False,
                        diagnostics=[
                            Diagnostic(
                                name or file_name,
                                0,
                                0,
                                "InvalidTemplateBase",
                                f"Compiled class does not derive from {self.template_base.__name__}",
                            )
                        ],
                    )
                if not compilation.success:
                    raise create_error(
                        "TEMPLATE_COMPILATION_FAILED",
                        file_name=file_name,
                        template_name=name,
                        diagnostics=compilation.diagnostics,
                        generated_source=generation.generated_source,
                    )
                template_class = compilation.template_class
            except SabreError as e:
                if compile_logger:
                    compile_logger.failed(e)
                raise

            duration_ms = int((time.perf_counter() - start) * 1000)
            span_attributes["template.class"] = template_class.__name__
            span_attributes["template.duration_ms"] = duration_ms
            if compile_logger:
                compile_logger.completed(duration_ms, template_class.__name__)

        return CompiledArtifact(
            key=key,
            name=name,
            template_class=template_class,
            fingerprint=compute_fingerprint(content, file_name, model_type),
            model_type=model_type,
            model_kind=model_kind_for(model_type),
            file_name=file_name,
            generated_source=generation.generated_source if self.enable_debug else None,
            source_filename=compilation.source_filename,
        )

    def _derives_from_base(self, template_class: Any) -> bool:
        return isinstance(template_class, type) and issubclass(template_class, self.template_base)

    def _forget_artifact_source(self, key: str, artifact: CompiledArtifact) -> None:
        forget_source(artifact.source_filename)

    # ─────────────────────────────────────────────────────────────────
    # Instances
    # ─────────────────────────────────────────────────────────────────

    def new_instance(self, artifact: CompiledArtifact) -> Template:
        """Create a template instance bound to this engine."""
        instance = artifact.template_class()
        instance.engine = self
        instance.name = artifact.name
        instance.model_kind = artifact.model_kind
        instance.model_type = artifact.model_type
        instance.model = None
        if self.enable_debug:
            instance.source = artifact.generated_source
        return instance

    def find_template(self, name: str) -> Template | None:
        """Find a template compiled under a logical name.

        Falls back to the template resolver when the cache has no artifact
        for the name.

        Returns:
            New template instance, or None
        """
        artifact = self._cache.get(name)
        if artifact is not None:
            return self.new_instance(artifact)
        if self.template_resolver is not None:
            return self.template_resolver(name)
        return None

    # ─────────────────────────────────────────────────────────────────
    # Render
    # ─────────────────────────────────────────────────────────────────

    def render(
        self,
        instance: Template,
        context: ExecutionContext | None = None,
        view_bag: ViewBag | Mapping[str, Any] | None = None,
    ) -> str:
        """Run a template chain with tracing and logging.

        Args:
            instance: Template to run
            context: Context to run with (default: a new one)
            view_bag: Initial view data for a new context

        Returns:
            Rendered output of the whole layout chain
        """
        render_logger = self._logger.render(instance.name) if self._logger else None

        with instrument_render(instance.name, self._tracer) as span_attributes:
            start = time.perf_counter()
            if render_logger:
                render_logger.started()

            try:
                output = instance.run(context, view_bag)
            except Exception as e:
                if render_logger:
                    render_logger.failed(e)
                raise

            duration_ms = int((time.perf_counter() - start) * 1000)
            span_attributes["template.output_length"] = len(output)
            if render_logger:
                render_logger.completed(duration_ms, len(output))

        return output
