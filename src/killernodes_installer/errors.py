"""Domain errors for the KILLER NODES installer."""


class InstallerError(RuntimeError):
    """Raised when the installation cannot continue safely."""


class UnsupportedOSError(InstallerError):
    pass


class InsufficientMemoryError(InstallerError):
    pass


class PackageManagerError(InstallerError):
    pass


class CloneError(InstallerError):
    pass


class MissingTemplateError(InstallerError):
    pass


class BuildError(InstallerError):
    pass


class StartupError(InstallerError):
    pass


class CertIssuanceError(InstallerError):
    pass


class SchedulerError(InstallerError):
    pass
