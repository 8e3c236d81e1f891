# crystal3d/multithread/dispatcher.py
# ---------------------------------------------------------------
# Dispatcher – «выполнить на потоке рендера».  Создание материалов,
# декодирование текстур и сборка узлов сцены должны происходить
# на одном выделенном потоке; парсер копит данные в обычных
# структурах и в конце отдаёт работу сюда.
#
# TaskPool – простой пул задач на основе concurrent.futures для
# параллельного чтения нескольких файлов (у каждого свой reader).
# ---------------------------------------------------------------

from concurrent.futures import ThreadPoolExecutor
import queue
import threading


class Dispatcher:
    """Один выделенный поток; `invoke` блокирует до получения результата."""

    def __init__(self, name: str = "crystal3d-render"):
        self.name = name
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._thread_ident = None
        self._shutdown = False
        # Запоминаем идентификатор потока, чтобы вложенные invoke не
        # вставали в очередь к самим себе.
        self.executor.submit(self._remember_thread).result()

    def _remember_thread(self):
        self._thread_ident = threading.get_ident()

    def check_access(self) -> bool:
        """True, если текущий поток – поток диспетчера."""
        return threading.get_ident() == self._thread_ident

    def invoke(self, fn, *args, **kwargs):
        """Выполнить fn на потоке диспетчера и вернуть результат (исключения пробрасываются)."""
        if self._shutdown:
            raise RuntimeError("Dispatcher already shut down")
        if self.check_access():
            return fn(*args, **kwargs)
        return self.executor.submit(fn, *args, **kwargs).result()

    def shutdown(self, wait=True):
        self._shutdown = True
        self.executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()


class TaskPool:
    """Пул готового количества потоков; задачи принимаются как callables."""

    def __init__(self, max_workers=None):
        self.executor = ThreadPoolExecutor(max_workers=max_workers)
        self.tasks = queue.Queue()
        self._shutdown = False

    def submit(self, fn, *args, **kwargs):
        """Отправить задачу в пул, вернуть Future."""
        if self._shutdown:
            raise RuntimeError("TaskPool already shut down")
        future = self.executor.submit(fn, *args, **kwargs)
        self.tasks.put(future)
        return future

    def wait_all(self):
        """Блокировать до завершения всех поставленных задач."""
        while not self.tasks.empty():
            future = self.tasks.get()
            future.result()  # пробрасывает исключения, если они возникли

    def shutdown(self, wait=True):
        self._shutdown = True
        self.executor.shutdown(wait=wait)
